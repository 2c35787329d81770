# fleet_repairs/routes/pages.py
from flask import Blueprint, Response, current_app, render_template

from fleet_repairs.utils.auth import current_role

pages_bp = Blueprint("pages", __name__)

# path -> (template, title); the access hook has already gated these
PAGES = {
    "/": ("index.html", "Report an Issue"),
    "/report": ("report.html", "Report an Issue"),
    "/access": ("access.html", "Staff Access"),
    "/workshop": ("workshop.html", "Workshop"),
    "/operations": ("operations.html", "Operations"),
    "/schedule": ("schedule.html", "Schedule"),
    "/issues": ("issues.html", "Issues"),
    "/admin": ("admin.html", "Admin"),
}


def _make_view(template, title):
    def view():
        return render_template(template, title=title, role=current_role())
    return view


for _path, (_template, _title) in PAGES.items():
    pages_bp.add_url_rule(
        _path,
        endpoint=_template.rsplit(".", 1)[0],
        view_func=_make_view(_template, _title),
    )


@pages_bp.get("/fleet/<fleet_number>/history")
def fleet_history_page(fleet_number):
    return render_template(
        "fleet_history.html",
        title=f"Fleet {fleet_number} History",
        fleet_number=fleet_number,
        role=current_role(),
    )


# -----------------------------------------------------------------------------
# GET /robots.txt
# -----------------------------------------------------------------------------
def robots_txt(production, app_url):
    if not production:
        return "User-agent: *\nDisallow: /\n"
    return (
        "User-agent: *\n"
        "Allow: /\n"
        "Disallow: /admin\n"
        "Disallow: /api/\n"
        "Disallow: /operations\n"
        "Disallow: /workshop\n"
        "\n"
        f"Sitemap: {app_url}/sitemap.xml\n"
    )


@pages_bp.get("/robots.txt")
def robots():
    body = robots_txt(
        current_app.config.get("APP_ENV") == "production",
        current_app.config.get("APP_URL", "").rstrip("/"),
    )
    return Response(body, mimetype="text/plain", headers={"Cache-Control": "public, max-age=3600"})
