from flask import Blueprint, abort, jsonify, redirect, render_template, url_for

# Create a blueprint for main routes
bp = Blueprint("main", __name__)

SERVICE_NAME = "Nashr"


@bp.route("/health")
def health():
    return jsonify({"ok": True, "service": SERVICE_NAME})


@bp.route("/")
def landing():
    return render_template("landing.html")


@bp.route("/app")
def app_page():
    return render_template("app.html")


@bp.route("/app/")
def app_page_slash():
    return redirect(url_for("main.app_page"))


@bp.route("/<path:path>")
def fallback(path):
    """Unknown pages land on the landing page; unknown API paths stay 404."""
    if path.startswith("api/"):
        abort(404)
    return render_template("landing.html")
