"""Dashboard web application for the NutriTrack practice.

This module exposes a Flask application serving the practitioner screens:
an overview, patient records and appointments. Each request builds the
controller for the addressed screen, lets it fetch through the data access
layer, applies any posted action and renders the resulting state. All
dashboard screens require a signed-in practitioner.
"""
from __future__ import annotations

import dataclasses
import functools
import logging
import os
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from flask import (
    Blueprint,
    Flask,
    current_app,
    flash,
    g,
    has_request_context,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from jinja2 import DictLoader

from connector import (
    DURATION_OPTIONS,
    PATIENT_STATUSES,
    AuthClientProtocol,
    StoreAuthClient,
    StoreTableClient,
    TableClientProtocol,
)
from connector.settings import Settings
from controllers import (
    AppointmentCreateController,
    AppointmentDetailController,
    AppointmentForm,
    AppointmentListController,
    DashboardController,
    PatientCreateController,
    PatientDetailController,
    PatientForm,
    PatientListController,
    SessionProvider,
)
from controllers.formatting import format_duration, format_long_date, time_of_day_marker
from controllers.patients import STATUS_FILTERS
from services import DataAccess

from .templates import TEMPLATES

logger = logging.getLogger(__name__)

EXTENSION_KEY = "nutritrack"

bp = Blueprint("dashboard", __name__)


def _services() -> dict:
    return current_app.extensions[EXTENSION_KEY]


def _data() -> DataAccess:
    return _services()["data_access"]


def _session_provider() -> SessionProvider:
    return g.session_provider


def current_access_token() -> Optional[str]:
    """Access token of the practitioner behind the current request, if any."""

    if not has_request_context():
        return None
    provider = g.get("session_provider")
    return provider.access_token if provider else None


@bp.before_app_request
def load_identity() -> None:
    services = _services()
    provider = SessionProvider(
        services["auth_client"],
        session,
        reset_redirect=services.get("reset_redirect"),
    )
    provider.restore()
    g.session_provider = provider


@bp.app_context_processor
def inject_identity() -> dict:
    provider = g.get("session_provider")
    return {"identity": provider.identity if provider else None}


def login_required(view: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(view)
    def wrapped(*args: Any, **kwargs: Any) -> Any:
        provider = _session_provider()
        if provider.is_loading:
            return render_template("loading.html", label="Checking your session..."), 503
        if provider.identity is None:
            return redirect(url_for("dashboard.login", next=request.path))
        return view(*args, **kwargs)

    return wrapped


def _form_fields(form_type: type) -> list:
    return [field.name for field in dataclasses.fields(form_type)]


def _safe_next(target: Optional[str]) -> str:
    # Browsers treat backslashes as slashes, so "/\host" is protocol-relative too.
    if not target or not target.startswith("/") or "\\" in target or target.startswith("//"):
        return url_for("dashboard.overview")
    if urlsplit(target).netloc:
        return url_for("dashboard.overview")
    return target


# Authentication --------------------------------------------------------


@bp.route("/", methods=["GET"])
def index():
    if _session_provider().identity is None:
        return redirect(url_for("dashboard.login"))
    return redirect(url_for("dashboard.overview"))


@bp.route("/login", methods=["GET", "POST"])
def login():
    provider = _session_provider()
    if request.method == "GET":
        if provider.identity is not None:
            return redirect(url_for("dashboard.overview"))
        return render_template("login.html", next_url=request.args.get("next"))

    email = request.form.get("email", "")
    result = provider.sign_in(email, request.form.get("password", ""))
    if not result.ok:
        return render_template("login.html", error=result.error, email=email, next_url=request.form.get("next")), 401
    return redirect(_safe_next(request.form.get("next")))


@bp.route("/signup", methods=["GET", "POST"])
def signup():
    if request.method == "GET":
        return render_template("signup.html")

    email = request.form.get("email", "")
    result = _session_provider().sign_up(
        email,
        request.form.get("password", ""),
        request.form.get("confirm_password", ""),
    )
    if not result.ok:
        return render_template("signup.html", error=result.error, email=email), 400
    return render_template(
        "signup.html",
        success="Registration successful! Please check your email to confirm your account.",
    )


@bp.route("/forgot-password", methods=["GET", "POST"])
def forgot_password():
    if request.method == "GET":
        return render_template("forgot_password.html")

    email = request.form.get("email", "")
    result = _session_provider().reset_password(email)
    if not result.ok:
        return render_template("forgot_password.html", error=result.error, email=email), 400
    return render_template("forgot_password.html", success="Password reset link sent! Please check your email.")


@bp.route("/logout", methods=["POST"])
def logout():
    _session_provider().sign_out()
    return redirect(url_for("dashboard.login"))


@bp.route("/healthz", methods=["GET"])
def healthz():
    return jsonify({"status": "ok"})


# Overview --------------------------------------------------------------


@bp.route("/dashboard", methods=["GET"])
@login_required
def overview():
    identity = _session_provider().identity
    controller = DashboardController(_data(), practitioner_email=identity.email if identity else None)
    controller.load()
    status = 503 if controller.error else 200
    return (
        render_template(
            "overview.html",
            controller=controller,
            stats=controller.stats(),
            recent_patients=controller.recent_patients(),
            schedule=controller.schedule_preview(),
        ),
        status,
    )


# Patients --------------------------------------------------------------


@bp.route("/dashboard/patients", methods=["GET"])
@login_required
def patients():
    controller = PatientListController(
        _data(),
        search_term=request.args.get("search", ""),
        status_filter=request.args.get("status", "all"),
    )
    controller.load()
    status = 503 if controller.error else 200
    return render_template("patients.html", controller=controller, status_filters=STATUS_FILTERS), status


@bp.route("/dashboard/patients/new", methods=["GET", "POST"])
@login_required
def new_patient():
    if request.method == "GET":
        return render_template("patient_new.html", controller=PatientCreateController(_data()))

    form = PatientForm(**{key: request.form.get(key, "") for key in _form_fields(PatientForm)})
    form.status = form.status or "Active"
    controller = PatientCreateController(_data(), form)
    created = controller.submit()
    if created is None:
        return render_template("patient_new.html", controller=controller), 400
    flash(f"Patient {created.name} added.", "success")
    return redirect(url_for("dashboard.patients"))


def _render_patient_detail(controller: PatientDetailController, status: int = 200):
    if controller.not_found:
        status = 404
    elif controller.error:
        status = 503
    upcoming, past = controller.appointment_history()
    return (
        render_template(
            "patient_detail.html",
            controller=controller,
            upcoming=upcoming,
            past=past,
            statuses=PATIENT_STATUSES,
        ),
        status,
    )


@bp.route("/dashboard/patients/<patient_id>", methods=["GET"])
@login_required
def patient_detail(patient_id: str):
    controller = PatientDetailController(_data(), patient_id)
    controller.load()
    return _render_patient_detail(controller)


@bp.route("/dashboard/patients/<patient_id>/status", methods=["POST"])
@login_required
def patient_status(patient_id: str):
    controller = PatientDetailController(_data(), patient_id)
    controller.load()
    if controller.patient is None:
        return _render_patient_detail(controller)
    if not controller.change_status(request.form.get("status", "")):
        return _render_patient_detail(controller, 400)
    flash(f"Status updated to {controller.patient.status}.", "success")
    return redirect(url_for("dashboard.patient_detail", patient_id=patient_id))


# Appointments ----------------------------------------------------------


@bp.route("/dashboard/appointments", methods=["GET"])
@login_required
def appointments():
    controller = AppointmentListController(
        _data(),
        view=request.args.get("view", "list"),
        search_term=request.args.get("search", ""),
        date_filter=request.args.get("date", ""),
        type_filter=request.args.get("type", "all"),
    )
    controller.load()
    status = 503 if controller.error else 200
    buckets = controller.calendar() if controller.view == "calendar" else []
    return render_template("appointments.html", controller=controller, buckets=buckets), status


@bp.route("/dashboard/appointments/new", methods=["GET", "POST"])
@login_required
def new_appointment():
    controller = AppointmentCreateController(_data())
    if request.method == "GET":
        controller.update_form(patient_id=request.args.get("patient", ""))
    else:
        posted = {key: request.form.get(key, "") for key in _form_fields(AppointmentForm)}
        posted["duration"] = posted["duration"] or controller.form.duration
        controller.update_form(**posted)
    controller.load()
    if controller.error:
        return (
            render_template("appointment_new.html", controller=controller, load_failed=True, preview=controller.preview()),
            503,
        )

    if request.method == "POST" and request.form.get("action", "create") == "create":
        created = controller.submit()
        if created is not None:
            flash(f"Appointment scheduled for {created.patient_name}.", "success")
            return redirect(url_for("dashboard.appointments"))
        return (
            render_template("appointment_new.html", controller=controller, load_failed=False, preview=controller.preview()),
            400,
        )
    return render_template("appointment_new.html", controller=controller, load_failed=False, preview=controller.preview())


def _render_appointment_detail(controller: AppointmentDetailController, status: int = 200):
    if controller.not_found:
        status = 404
    elif controller.error:
        status = 503
    return (
        render_template("appointment_detail.html", controller=controller, durations=DURATION_OPTIONS),
        status,
    )


@bp.route("/dashboard/appointments/<appointment_id>", methods=["GET"])
@login_required
def appointment_detail(appointment_id: str):
    controller = AppointmentDetailController(_data(), appointment_id)
    controller.load()
    if request.args.get("confirm") == "cancel":
        controller.request_cancel()
    return _render_appointment_detail(controller)


def _appointment_action(appointment_id: str, action: Callable[[AppointmentDetailController], bool], done: str):
    controller = AppointmentDetailController(_data(), appointment_id)
    controller.load()
    if controller.appointment is None:
        return _render_appointment_detail(controller)
    if not controller.can_modify:
        flash("This appointment can no longer be changed.", "warning")
        return redirect(url_for("dashboard.appointment_detail", appointment_id=appointment_id))
    if not action(controller):
        return _render_appointment_detail(controller, 400 if controller.action_error else 409)
    flash(done, "success")
    return redirect(url_for("dashboard.appointment_detail", appointment_id=appointment_id))


@bp.route("/dashboard/appointments/<appointment_id>/cancel", methods=["POST"])
@login_required
def cancel_appointment(appointment_id: str):
    if request.form.get("confirm") != "yes":
        return redirect(url_for("dashboard.appointment_detail", appointment_id=appointment_id, confirm="cancel"))

    def cancel(controller: AppointmentDetailController) -> bool:
        controller.request_cancel()
        return controller.confirm_cancel()

    return _appointment_action(appointment_id, cancel, "Appointment cancelled.")


@bp.route("/dashboard/appointments/<appointment_id>/complete", methods=["POST"])
@login_required
def complete_appointment(appointment_id: str):
    return _appointment_action(
        appointment_id,
        lambda controller: controller.complete(),
        "Appointment marked as completed.",
    )


@bp.route("/dashboard/appointments/<appointment_id>/reschedule", methods=["POST"])
@login_required
def reschedule_appointment(appointment_id: str):
    return _appointment_action(
        appointment_id,
        lambda controller: controller.reschedule(
            request.form.get("date", ""),
            request.form.get("time", ""),
            request.form.get("duration"),
        ),
        "Appointment rescheduled.",
    )


# Application factory ---------------------------------------------------


def create_app(
    settings: Optional[Settings] = None,
    *,
    table_client: Optional[TableClientProtocol] = None,
    auth_client: Optional[AuthClientProtocol] = None,
    secret_key: Optional[str] = None,
) -> Flask:
    """Build the dashboard application.

    Without explicit clients the store connection is read from the
    environment and missing connection settings abort startup.
    """

    if table_client is None or auth_client is None:
        settings = settings or Settings.from_env()
        if table_client is None:
            table_client = StoreTableClient(
                base_url=settings.store_url,
                api_key=settings.store_key,
                token_provider=current_access_token,
                timeout=settings.timeout,
                max_retries=settings.max_retries,
            )
        if auth_client is None:
            auth_client = StoreAuthClient(
                base_url=settings.store_url,
                api_key=settings.store_key,
                timeout=settings.timeout,
                max_retries=settings.max_retries,
            )

    app = Flask(__name__)
    app.jinja_loader = DictLoader(TEMPLATES)
    app.jinja_env.filters["long_date"] = format_long_date
    app.jinja_env.filters["duration"] = format_duration
    app.jinja_env.filters["time_marker"] = time_of_day_marker

    secret_key = secret_key or (settings.secret_key if settings else None)
    if not secret_key:
        logger.warning("FLASK_SECRET_KEY is not set; sessions will not survive a restart")
        secret_key = os.urandom(32).hex()
    app.secret_key = secret_key

    app.extensions[EXTENSION_KEY] = {
        "data_access": DataAccess(table_client),
        "auth_client": auth_client,
        "reset_redirect": settings.password_reset_redirect if settings else None,
    }
    app.register_blueprint(bp)
    return app


if __name__ == "__main__":
    application = create_app()
    application.run(
        host="0.0.0.0",
        port=int(os.environ.get("PORT", "5000")),
        debug=False,
    )
