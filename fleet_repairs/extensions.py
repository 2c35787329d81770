# fleet_repairs/extensions.py
from flask import request
from flask_caching import Cache
from flask_limiter import Limiter
from flask_mail import Mail

from fleet_repairs.services.access_control import client_key

cache = Cache(config={'CACHE_TYPE': 'SimpleCache'})
mail = Mail()
limiter = Limiter(key_func=lambda: client_key(request.headers))


def init_cache(app):
    cache.init_app(app)


@limiter.request_filter
def _only_api_requests():
    return not request.path.startswith("/api/")
