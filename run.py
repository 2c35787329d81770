# run.py
from fleet_repairs import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config.get("APP_ENV") != "production", host="0.0.0.0", threaded=True)
