from datetime import datetime, timedelta, timezone
import logging

from dotenv import load_dotenv
from flask import (
    Flask,
    flash,
    jsonify,
    session,
    request,
    render_template,
    redirect,
    url_for,
    g,
)
from flask_migrate import Migrate
from flask_wtf.csrf import CSRFProtect

from sqlalchemy.exc import SQLAlchemyError
from config import load_config
from database import db


# Initialize Flask app
load_dotenv()
app = Flask(__name__)
app.config.from_mapping(load_config())

logging.basicConfig(
    level=app.config["LOG_LEVEL"],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

db.init_app(app)
csrf = CSRFProtect(app)

# Models import should be after initializing db
from models.user import User
from models.project import Project
from models.feature import Feature

from forms import LoginForm, SignupForm
from services.status_service import ProjectStatus
from routes.projects import projects_bp
from routes.features import features_bp
from routes import json_error, wants_json_response

# Create flask command lines to update the db based on the model
# Useage:
# Create a migration script in ./migrations/versions
# > flask db migrate -m "Update comments"
# Run the update
# > flask db upgrade
migrate = Migrate(app, db)
app.register_blueprint(projects_bp)
app.register_blueprint(features_bp)

# User Authentication
# ------------------------------
login_exempt_routes = ["login", "logout", "signup", "static", "session_status"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _session_expires_at() -> datetime | None:
    """Return when the current session expires if the user stays idle."""
    last_seen = session.get("last_seen")
    if last_seen is None:
        return None
    lifetime: timedelta = app.config["PERMANENT_SESSION_LIFETIME"]
    return datetime.fromtimestamp(last_seen, tz=timezone.utc) + lifetime


def _clear_login():
    session.pop("user_id", None)
    session.pop("user", None)
    session.pop("last_seen", None)
    g.user = None


@app.before_request
def require_login():
    """All routes require a User logged in, except the ones listed in login_exempt_routes

    This method excecutes before every request and checks if there is a user_id
    stored in session. If so, it sets the g.user that contains the object User which
    can be used in the subsecuent method. Sessions idle for longer than
    PERMANENT_SESSION_LIFETIME are cleared. The session probe does not count as
    activity so that clients can poll it.

    Returns:
        Redirects to the login page (or answers 401 to JSON clients) if no user is found in session
    """
    g.user = None
    user_id = session.get("user_id")
    if user_id:
        expires_at = _session_expires_at()
        if expires_at is not None and expires_at <= _now():
            logging.info("Session for user %s expired", user_id)
            _clear_login()
        else:
            g.user = db.session.get(User, user_id)
            if g.user is None:
                _clear_login()
            elif request.endpoint != "session_status":
                session["last_seen"] = _now().timestamp()

    if g.user is None and request.endpoint and request.endpoint not in login_exempt_routes:
        if wants_json_response():
            return json_error("Authentication required.", status=401)
        flash("Please login", "info")
        return redirect(url_for("login", next=request.path))


@app.context_processor
def inject_user():
    """Injects the logged in User to every template"""
    return {"current_user": getattr(g, "user", None)}


def authenticate_user(username, password):
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        session.permanent = True
        session["user_id"] = user.id
        session["user"] = user.name
        session["last_seen"] = _now().timestamp()
        return True
    return False


def _safe_next(target: str | None) -> str | None:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return None


@app.route("/login", methods=["GET", "POST"])
def login():
    """
    Handle the login functionality.

    Receives HTTP requests to the '/login' endpoint and supports both GET and
    POST methods. A successful login redirects to the page that triggered the
    login, or to the dashboard.

    Returns:
        The rendered login page template with the login form.
    """
    login_form = LoginForm()
    if login_form.validate_on_submit():
        if authenticate_user(login_form.username.data, login_form.password.data):
            return redirect(_safe_next(request.args.get("next")) or url_for("home"))
        else:
            flash("Invalid username or password", "danger")
    return render_template("login.html", login_form=login_form)


@app.route("/logout")
def logout():
    _clear_login()
    return redirect(url_for("login"))


@app.route("/signup", methods=["GET", "POST"])
def signup():
    signup_form = SignupForm()
    if signup_form.validate_on_submit():
        user = User(
            username=signup_form.username.data,
            name=signup_form.name.data,
            email=signup_form.email.data,
        )
        user.set_password(signup_form.password.data)
        try:
            db.session.add(user)
            db.session.commit()
            flash("Registration successful! You can now log in.", "success")
            return redirect(url_for("login"))
        except SQLAlchemyError:
            db.session.rollback()  # Roll back the transaction
            logging.error("Database error during signup", exc_info=True)
            flash("An error occurred while creating the account.", "danger")
    return render_template("signup.html", signup_form=signup_form)


@app.route("/api/session")
def session_status():
    """Report the state of the current session so clients can poll for expiry."""
    user = getattr(g, "user", None)
    if user is None:
        return jsonify({"authenticated": False, "user": None, "expires_at": None})
    expires_at = _session_expires_at()
    return jsonify(
        {
            "authenticated": True,
            "user": user.to_dict(),
            "expires_at": expires_at.isoformat() if expires_at else None,
        }
    )


# Template filters
# ------------------------------
STATUS_BADGE_CLASSES = {
    ProjectStatus.PLANNING: "text-bg-primary",
    ProjectStatus.IN_PROGRESS: "text-bg-warning",
    ProjectStatus.BLOCKED: "text-bg-danger",
    ProjectStatus.COMPLETED: "text-bg-success",
}


def dateformat(value, format="%Y-%m-%d"):
    if value is None:
        return ""
    return value.strftime(format)


def status_badge(status):
    return STATUS_BADGE_CLASSES.get(status, "text-bg-secondary")


app.jinja_env.filters["dateformat"] = dateformat
app.jinja_env.filters["status_badge"] = status_badge


# Home
# ------------------------------
@app.route("/")
def home():
    return redirect(url_for("projects.list_projects"))


@app.errorhandler(404)
def not_found(error):
    if wants_json_response():
        return json_error("Not found.", status=404)
    return render_template("404.html"), 404


# Application Execution
# ------------------------------
if __name__ == "__main__":
    app.run(debug=True)
