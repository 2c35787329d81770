import logging
import os
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(app):
    try:
        log_file_path = os.path.abspath(
            os.path.join(os.path.dirname(__file__), '../..', 'app.log')
        )

        file_handler = RotatingFileHandler(log_file_path, maxBytes=100000, backupCount=3)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        # create_app may run several times in one process (tests)
        app.logger.handlers.clear()
        app.logger.addHandler(file_handler)
        app.logger.addHandler(console_handler)
        app.logger.setLevel(logging.INFO)

        # services log through logging.getLogger("fleet_repairs.services...")
        pkg_logger = logging.getLogger("fleet_repairs")
        if not pkg_logger.handlers:
            pkg_logger.addHandler(console_handler)
            pkg_logger.setLevel(logging.INFO)

        app.logger.info("Logging setup complete")
    except OSError as e:
        print(f"Error setting up logging: {e}")
