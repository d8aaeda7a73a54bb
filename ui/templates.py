"""Jinja templates for the dashboard screens, served through a ``DictLoader``."""

BASE = """
<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    <title>{% block title %}NutriTrack Pro{% endblock %}</title>
    <link
      href="https://cdn.jsdelivr.net/npm/bootstrap@5.3.3/dist/css/bootstrap.min.css"
      rel="stylesheet"
      integrity="sha384-QWTKZyjpPEjISv5WaRU9OFeRpok6YctnYmDr5pNlyT2bRjXh0JMhjY6hW+ALEwIH"
      crossorigin="anonymous"
    >
  </head>
  <body class="bg-light">
    <nav class="navbar navbar-expand-lg navbar-dark bg-primary">
      <div class="container-fluid">
        <a class="navbar-brand" href="{{ url_for('dashboard.overview') }}">NutriTrack<strong>Pro</strong></a>
        {% if identity %}
          <ul class="navbar-nav me-auto">
            <li class="nav-item"><a class="nav-link" href="{{ url_for('dashboard.overview') }}">Overview</a></li>
            <li class="nav-item"><a class="nav-link" href="{{ url_for('dashboard.patients') }}">Patients</a></li>
            <li class="nav-item"><a class="nav-link" href="{{ url_for('dashboard.appointments') }}">Appointments</a></li>
          </ul>
          <form method="post" action="{{ url_for('dashboard.logout') }}" class="d-flex align-items-center">
            <span class="navbar-text me-3">{{ identity.email }}</span>
            <button type="submit" class="btn btn-outline-light btn-sm">Sign out</button>
          </form>
        {% endif %}
      </div>
    </nav>
    <main class="container my-4">
      {% with messages = get_flashed_messages(with_categories=true) %}
        {% for category, message in messages %}
          <div class="alert alert-{{ category }}" role="alert">{{ message }}</div>
        {% endfor %}
      {% endwith %}
      {% block content %}{% endblock %}
    </main>
  </body>
</html>
"""

MACROS = """
{% macro error_panel(message) %}
  <div class="card border-danger bg-danger-subtle text-center p-4" role="alert">
    <h2 class="h4 text-danger">Error</h2>
    <p class="text-danger">{{ message }}</p>
    <a class="btn btn-primary" href="{{ request.url }}">Try Again</a>
  </div>
{% endmacro %}

{% macro not_found_panel(title, message, back_url, back_label) %}
  <div class="card border-warning bg-warning-subtle text-center p-4">
    <h2 class="h4 text-warning-emphasis">{{ title }}</h2>
    <p>{{ message }}</p>
    <a class="btn btn-primary" href="{{ back_url }}">{{ back_label }}</a>
  </div>
{% endmacro %}

{% macro empty_state(message) %}
  <div class="card p-4 text-center text-muted">{{ message }}</div>
{% endmacro %}

{% macro appointment_badge(status) %}
  {% set styles = {"Scheduled": "primary", "Completed": "success", "Cancelled": "danger"} %}
  <span class="badge text-bg-{{ styles.get(status, 'secondary') }}">{{ status }}</span>
{% endmacro %}

{% macro patient_badge(status) %}
  {% set styles = {"Active": "success", "Inactive": "secondary", "On Hold": "warning"} %}
  <span class="badge text-bg-{{ styles.get(status, 'secondary') }}">{{ status }}</span>
{% endmacro %}

{% macro field(value) %}{{ value if value is not none else '—' }}{% endmacro %}
"""

LOADING = """
{% extends "base.html" %}
{% block content %}
  <div class="text-center my-5">
    <div class="spinner-border text-primary" role="status"></div>
    <p class="mt-3">{{ label or "Loading..." }}</p>
  </div>
{% endblock %}
"""

LOGIN = """
{% extends "base.html" %}
{% block title %}Sign in · NutriTrack Pro{% endblock %}
{% block content %}
  <div class="row justify-content-center">
    <div class="col-md-5">
      <h1 class="h3 text-center">Welcome Back</h1>
      <p class="text-center text-muted">Sign in to your account</p>
      {% if error %}<div class="alert alert-danger">{{ error }}</div>{% endif %}
      <form method="post" class="card p-4">
        <input type="hidden" name="next" value="{{ next_url or '' }}">
        <label class="form-label" for="email">Email address</label>
        <input class="form-control mb-3" id="email" name="email" type="email" value="{{ email or '' }}" required>
        <label class="form-label" for="password">Password</label>
        <input class="form-control mb-3" id="password" name="password" type="password" required>
        <button class="btn btn-primary w-100" type="submit">Sign in</button>
      </form>
      <p class="mt-3 text-center">
        <a href="{{ url_for('dashboard.forgot_password') }}">Forgot your password?</a> ·
        <a href="{{ url_for('dashboard.signup') }}">Create an account</a>
      </p>
    </div>
  </div>
{% endblock %}
"""

SIGNUP = """
{% extends "base.html" %}
{% block title %}Create account · NutriTrack Pro{% endblock %}
{% block content %}
  <div class="row justify-content-center">
    <div class="col-md-5">
      <h1 class="h3 text-center">Create an Account</h1>
      {% if error %}<div class="alert alert-danger">{{ error }}</div>{% endif %}
      {% if success %}<div class="alert alert-success">{{ success }}</div>{% endif %}
      <form method="post" class="card p-4">
        <label class="form-label" for="email">Email address</label>
        <input class="form-control mb-3" id="email" name="email" type="email" value="{{ email or '' }}" required>
        <label class="form-label" for="password">Password</label>
        <input class="form-control mb-3" id="password" name="password" type="password" required>
        <label class="form-label" for="confirm_password">Confirm password</label>
        <input class="form-control mb-3" id="confirm_password" name="confirm_password" type="password" required>
        <button class="btn btn-primary w-100" type="submit">Sign up</button>
      </form>
      <p class="mt-3 text-center"><a href="{{ url_for('dashboard.login') }}">Already have an account? Sign in</a></p>
    </div>
  </div>
{% endblock %}
"""

FORGOT_PASSWORD = """
{% extends "base.html" %}
{% block title %}Reset password · NutriTrack Pro{% endblock %}
{% block content %}
  <div class="row justify-content-center">
    <div class="col-md-5">
      <h1 class="h3 text-center">Reset Password</h1>
      {% if error %}<div class="alert alert-danger">{{ error }}</div>{% endif %}
      {% if success %}<div class="alert alert-success">{{ success }}</div>{% endif %}
      <form method="post" class="card p-4">
        <label class="form-label" for="email">Email address</label>
        <input class="form-control mb-3" id="email" name="email" type="email" value="{{ email or '' }}" required>
        <button class="btn btn-primary w-100" type="submit">Send reset link</button>
      </form>
      <p class="mt-3 text-center"><a href="{{ url_for('dashboard.login') }}">Back to sign in</a></p>
    </div>
  </div>
{% endblock %}
"""

OVERVIEW = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  {% if controller.error %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    <h1 class="h3">Welcome back, Dr. {{ controller.greeting_name }}</h1>
    <p class="text-muted">Here's what's happening with your practice today.</p>
    <section class="row g-3 mb-4">
      {% for label, value in [
        ("Total Patients", stats.total_patients),
        ("Appointments Today", stats.appointments_today),
        ("Diet Plans Active", stats.active_diet_plans),
        ("Upcoming Appointments", stats.upcoming_scheduled),
      ] %}
        <div class="col-sm-6 col-lg-3">
          <div class="card shadow-sm p-3">
            <p class="text-muted mb-1">{{ label }}</p>
            <p class="h3 mb-0">{{ value }}</p>
          </div>
        </div>
      {% endfor %}
    </section>
    <section class="row g-4">
      <div class="col-lg-6">
        <div class="card shadow-sm h-100">
          <div class="card-header d-flex justify-content-between">
            <span>Recent Patients</span><a href="{{ url_for('dashboard.patients') }}">View all</a>
          </div>
          <div class="card-body">
            {% if recent_patients %}
              <table class="table table-sm">
                <thead><tr><th>Name</th><th>Last Visit</th><th>Status</th></tr></thead>
                <tbody>
                  {% for patient in recent_patients %}
                    <tr>
                      <td><a href="{{ url_for('dashboard.patient_detail', patient_id=patient.id) }}">{{ patient.name }}</a></td>
                      <td>{{ ui.field(patient.last_visit) }}</td>
                      <td>{{ ui.patient_badge(patient.status) }}</td>
                    </tr>
                  {% endfor %}
                </tbody>
              </table>
            {% else %}
              <p class="text-muted mb-0">No recent patient visits.</p>
            {% endif %}
          </div>
        </div>
      </div>
      <div class="col-lg-6">
        <div class="card shadow-sm h-100">
          <div class="card-header d-flex justify-content-between">
            <span>Today's Appointments</span><a href="{{ url_for('dashboard.appointments') }}">View all</a>
          </div>
          <div class="card-body">
            {% for appointment in schedule %}
              <div class="border rounded p-2 mb-2">
                <a href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id) }}">{{ appointment.patient_name }}</a>
                <div class="text-muted small">{{ appointment.time }} - {{ appointment.type }}</div>
              </div>
            {% else %}
              <p class="text-muted mb-0">No appointments scheduled for today.</p>
            {% endfor %}
          </div>
        </div>
      </div>
    </section>
    <section class="mt-4">
      <a class="btn btn-outline-primary" href="{{ url_for('dashboard.new_patient') }}">Add Patient</a>
      <a class="btn btn-outline-success" href="{{ url_for('dashboard.new_appointment') }}">Schedule Appointment</a>
    </section>
  {% endif %}
{% endblock %}
"""

PATIENTS = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  <div class="d-flex justify-content-between align-items-center mb-3">
    <h1 class="h3">Patients</h1>
    <a class="btn btn-primary" href="{{ url_for('dashboard.new_patient') }}">Add Patient</a>
  </div>
  {% if controller.error %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    <form class="row g-2 mb-3" method="get">
      <div class="col-md-6">
        <input class="form-control" name="search" placeholder="Search by name, email or phone" value="{{ controller.search_term }}">
      </div>
      <div class="col-md-3">
        <select class="form-select" name="status">
          {% for option in status_filters %}
            <option value="{{ option }}" {% if option == controller.status_filter %}selected{% endif %}>
              {{ "All Statuses" if option == "all" else option }}
            </option>
          {% endfor %}
        </select>
      </div>
      <div class="col-md-3"><button class="btn btn-secondary w-100" type="submit">Filter</button></div>
    </form>
    {% set patients = controller.filtered_patients %}
    {% if patients %}
      <table class="table table-striped bg-white">
        <thead><tr><th>Name</th><th>Email</th><th>Phone</th><th>Next Appointment</th><th>Status</th></tr></thead>
        <tbody>
          {% for patient in patients %}
            <tr>
              <td><a href="{{ url_for('dashboard.patient_detail', patient_id=patient.id) }}">{{ patient.name }}</a></td>
              <td>{{ patient.email }}</td>
              <td>{{ patient.phone }}</td>
              <td>{{ ui.field(patient.next_appointment) }}</td>
              <td>{{ ui.patient_badge(patient.status) }}</td>
            </tr>
          {% endfor %}
        </tbody>
      </table>
    {% else %}
      {{ ui.empty_state("No patients found. Try adjusting your search or filters.") }}
    {% endif %}
  {% endif %}
{% endblock %}
"""

PATIENT_DETAIL = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  <a href="{{ url_for('dashboard.patients') }}">&larr; Back to Patients</a>
  {% if controller.not_found %}
    {{ ui.not_found_panel("Patient Not Found", "The patient you're looking for doesn't exist or has been removed.",
                          url_for('dashboard.patients'), "Return to Patients") }}
  {% elif controller.error %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    {% set patient = controller.patient %}
    <div class="d-flex justify-content-between align-items-center my-3">
      <h1 class="h3">{{ patient.name }} {{ ui.patient_badge(patient.status) }}</h1>
      <a class="btn btn-success" href="{{ url_for('dashboard.new_appointment', patient=patient.id) }}">Schedule Appointment</a>
    </div>
    {% if controller.action_error %}<div class="alert alert-danger">{{ controller.action_error }}</div>{% endif %}
    <div class="row g-4">
      <div class="col-lg-5">
        <div class="card p-3">
          <dl class="row mb-0">
            {% for label, value in [
              ("Email", patient.email), ("Phone", patient.phone), ("Age", patient.age),
              ("Gender", patient.gender), ("Date of Birth", patient.date_of_birth),
              ("Height", patient.height), ("Weight", patient.weight),
              ("Allergies", patient.allergies), ("Medical Conditions", patient.medical_conditions),
              ("Diet Plan", patient.diet_plan), ("Last Visit", patient.last_visit),
              ("Next Appointment", patient.next_appointment), ("Notes", patient.notes),
            ] %}
              <dt class="col-5">{{ label }}</dt><dd class="col-7">{{ ui.field(value) }}</dd>
            {% endfor %}
          </dl>
          <form method="post" action="{{ url_for('dashboard.patient_status', patient_id=patient.id) }}" class="d-flex gap-2 mt-3">
            <select class="form-select" name="status">
              {% for option in statuses %}
                <option value="{{ option }}" {% if option == patient.status %}selected{% endif %}>{{ option }}</option>
              {% endfor %}
            </select>
            <button class="btn btn-outline-primary" type="submit">Update Status</button>
          </form>
        </div>
      </div>
      <div class="col-lg-7">
        {% for title, items, empty in [
          ("Upcoming Appointments", upcoming, "No upcoming appointments."),
          ("Past Appointments", past, "No past appointments."),
        ] %}
          <h2 class="h5">{{ title }}</h2>
          {% if items %}
            <ul class="list-group mb-4">
              {% for appointment in items %}
                <li class="list-group-item d-flex justify-content-between">
                  <a href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id) }}">
                    {{ appointment.date | long_date }} at {{ appointment.time }} &middot; {{ appointment.type }}
                  </a>
                  {{ ui.appointment_badge(appointment.status) }}
                </li>
              {% endfor %}
            </ul>
          {% else %}
            <p class="text-muted">{{ empty }}</p>
          {% endif %}
        {% endfor %}
      </div>
    </div>
  {% endif %}
{% endblock %}
"""

PATIENT_NEW = """
{% extends "base.html" %}
{% block content %}
  <a href="{{ url_for('dashboard.patients') }}">&larr; Back to Patients</a>
  <h1 class="h3 my-3">Add New Patient</h1>
  {% if controller.error %}<div class="alert alert-danger">{{ controller.error }}</div>{% endif %}
  {% set form = controller.form %}
  <form method="post" class="card p-4">
    <h2 class="h5">Personal Information</h2>
    <div class="row g-3 mb-3">
      {% for name, label, kind, required in [
        ("first_name", "First Name", "text", true), ("last_name", "Last Name", "text", false),
        ("email", "Email", "email", true), ("phone", "Phone", "tel", true),
        ("date_of_birth", "Date of Birth", "date", false), ("age", "Age", "number", false),
        ("height", "Height", "text", false), ("weight", "Weight", "text", false),
      ] %}
        <div class="col-md-6">
          <label class="form-label" for="{{ name }}">{{ label }}</label>
          <input class="form-control" id="{{ name }}" name="{{ name }}" type="{{ kind }}"
                 value="{{ form[name] }}" {% if required %}required{% endif %}>
        </div>
      {% endfor %}
      <div class="col-md-6">
        <label class="form-label" for="gender">Gender</label>
        <select class="form-select" id="gender" name="gender">
          <option value="">Select Gender</option>
          {% for option in controller.gender_choices %}
            <option value="{{ option }}" {% if option == form.gender %}selected{% endif %}>{{ option }}</option>
          {% endfor %}
        </select>
      </div>
      <div class="col-md-6">
        <label class="form-label" for="status">Status</label>
        <select class="form-select" id="status" name="status">
          {% for option in controller.status_choices %}
            <option value="{{ option }}" {% if option == form.status %}selected{% endif %}>{{ option }}</option>
          {% endfor %}
        </select>
      </div>
    </div>
    <h2 class="h5">Health &amp; Nutrition</h2>
    <div class="row g-3 mb-3">
      {% for name, label in [
        ("allergies", "Allergies"), ("medical_conditions", "Medical Conditions"),
        ("diet_plan", "Diet Plan"), ("notes", "Notes"),
      ] %}
        <div class="col-md-6">
          <label class="form-label" for="{{ name }}">{{ label }}</label>
          <textarea class="form-control" id="{{ name }}" name="{{ name }}" rows="2">{{ form[name] }}</textarea>
        </div>
      {% endfor %}
    </div>
    <button class="btn btn-primary" type="submit">Save Patient</button>
  </form>
{% endblock %}
"""

APPOINTMENTS = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  <div class="d-flex justify-content-between align-items-center mb-3">
    <h1 class="h3">Appointments</h1>
    <a class="btn btn-success" href="{{ url_for('dashboard.new_appointment') }}">Schedule Appointment</a>
  </div>
  {% if controller.error %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    <form class="row g-2 mb-3" method="get">
      <input type="hidden" name="view" value="{{ controller.view }}">
      <div class="col-md-4">
        <input class="form-control" name="search" placeholder="Search patient or notes" value="{{ controller.search_term }}">
      </div>
      <div class="col-md-3"><input class="form-control" type="date" name="date" value="{{ controller.date_filter }}"></div>
      <div class="col-md-3">
        <select class="form-select" name="type">
          {% for option in controller.type_options %}
            <option value="{{ option }}" {% if option == controller.type_filter %}selected{% endif %}>
              {{ "All Types" if option == "all" else option }}
            </option>
          {% endfor %}
        </select>
      </div>
      <div class="col-md-2"><button class="btn btn-secondary w-100" type="submit">Filter</button></div>
    </form>
    <div class="btn-group mb-3">
      {% for option in ["list", "calendar"] %}
        <a class="btn btn-outline-primary {% if controller.view == option %}active{% endif %}"
           href="{{ url_for('dashboard.appointments', view=option, search=controller.search_term,
                            date=controller.date_filter, type=controller.type_filter) }}">{{ option | capitalize }}</a>
      {% endfor %}
    </div>
    {% set visible = controller.filtered_appointments %}
    {% if not visible %}
      {{ ui.empty_state("No appointments found. Try adjusting your search or filters.") }}
    {% elif controller.view == "list" %}
      <table class="table table-striped bg-white">
        <thead><tr><th>Patient</th><th>Date</th><th>Time</th><th>Duration</th><th>Type</th><th>Status</th></tr></thead>
        <tbody>
          {% for appointment in visible %}
            <tr>
              <td><a href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id) }}">{{ appointment.patient_name }}</a></td>
              <td>{{ appointment.date }}</td>
              <td>{{ appointment.time }}</td>
              <td>{{ appointment.duration | duration }}</td>
              <td>{{ ui.field(appointment.type) }}</td>
              <td>{{ ui.appointment_badge(appointment.status) }}</td>
            </tr>
          {% endfor %}
        </tbody>
      </table>
    {% else %}
      {% for bucket in buckets %}
        <div class="card shadow-sm mb-3">
          <div class="card-header">
            {{ bucket.label }}
            {% if bucket.is_today %}<span class="badge text-bg-success ms-2">Today</span>{% endif %}
          </div>
          <ul class="list-group list-group-flush">
            {% for appointment in bucket.appointments %}
              <li class="list-group-item d-flex justify-content-between" data-period="{{ appointment.time | time_marker }}">
                <a href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id) }}">
                  {{ appointment.time }} &middot; {{ appointment.patient_name }}
                </a>
                <span>{{ ui.field(appointment.type) }} {{ ui.appointment_badge(appointment.status) }}</span>
              </li>
            {% endfor %}
          </ul>
        </div>
      {% endfor %}
    {% endif %}
  {% endif %}
{% endblock %}
"""

APPOINTMENT_DETAIL = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  <a href="{{ url_for('dashboard.appointments') }}">&larr; Back to Appointments</a>
  {% if controller.not_found %}
    {{ ui.not_found_panel("Appointment Not Found", "The appointment you're looking for doesn't exist or has been removed.",
                          url_for('dashboard.appointments'), "Back to Appointments") }}
  {% elif controller.error %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    {% set appointment = controller.appointment %}
    <h1 class="h3 my-3">Appointment with {{ appointment.patient_name }} {{ ui.appointment_badge(appointment.status) }}</h1>
    {% if controller.action_error %}<div class="alert alert-danger">{{ controller.action_error }}</div>{% endif %}
    <div class="row g-4">
      <div class="col-lg-7">
        <div class="card p-3">
          <dl class="row mb-0">
            <dt class="col-4">Date</dt><dd class="col-8">{{ appointment.date | long_date }}</dd>
            <dt class="col-4">Time</dt><dd class="col-8">{{ appointment.time }}</dd>
            <dt class="col-4">Duration</dt><dd class="col-8">{{ appointment.duration | duration }}</dd>
            <dt class="col-4">Type</dt><dd class="col-8">{{ ui.field(appointment.type) }}</dd>
            <dt class="col-4">Notes</dt><dd class="col-8">{{ ui.field(appointment.notes) }}</dd>
          </dl>
        </div>
        {% if controller.can_modify %}
          <div class="card p-3 mt-3">
            {% if controller.show_cancel_confirm %}
              <p>Are you sure you want to cancel this appointment?</p>
              <form method="post" action="{{ url_for('dashboard.cancel_appointment', appointment_id=appointment.id) }}" class="d-inline">
                <input type="hidden" name="confirm" value="yes">
                <button class="btn btn-danger" type="submit">Yes, Cancel Appointment</button>
              </form>
              <a class="btn btn-outline-secondary" href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id) }}">Keep Appointment</a>
            {% else %}
              <form method="post" action="{{ url_for('dashboard.complete_appointment', appointment_id=appointment.id) }}" class="d-inline">
                <button class="btn btn-success" type="submit">Mark as Completed</button>
              </form>
              <a class="btn btn-outline-danger" href="{{ url_for('dashboard.appointment_detail', appointment_id=appointment.id, confirm='cancel') }}">Cancel Appointment</a>
            {% endif %}
          </div>
          <form method="post" action="{{ url_for('dashboard.reschedule_appointment', appointment_id=appointment.id) }}" class="card p-3 mt-3 row g-2">
            <h2 class="h6">Reschedule</h2>
            <input class="form-control" type="date" name="date" value="{{ appointment.date }}" required>
            <input class="form-control" type="time" name="time" value="{{ appointment.time }}" required>
            <select class="form-select" name="duration">
              {% for minutes in durations %}
                <option value="{{ minutes }}" {% if minutes == appointment.duration %}selected{% endif %}>{{ minutes }} minutes</option>
              {% endfor %}
            </select>
            <button class="btn btn-outline-primary" type="submit">Reschedule</button>
          </form>
        {% endif %}
      </div>
      <div class="col-lg-5">
        <div class="card p-3">
          <h2 class="h5">Patient</h2>
          {% if controller.patient %}
            <p class="mb-1"><a href="{{ url_for('dashboard.patient_detail', patient_id=controller.patient.id) }}">{{ controller.patient.name }}</a></p>
            <p class="mb-1 text-muted">{{ controller.patient.email }} &middot; {{ controller.patient.phone }}</p>
            <p class="mb-0">Diet plan: {{ ui.field(controller.patient.diet_plan) }}</p>
          {% else %}
            <p class="text-muted mb-0">Patient record unavailable.</p>
          {% endif %}
        </div>
      </div>
    </div>
  {% endif %}
{% endblock %}
"""

APPOINTMENT_NEW = """
{% extends "base.html" %}
{% import "macros.html" as ui with context %}
{% block content %}
  <a href="{{ url_for('dashboard.appointments') }}">&larr; Back to Appointments</a>
  <h1 class="h3 my-3">Schedule Appointment</h1>
  {% if load_failed %}
    {{ ui.error_panel(controller.error) }}
  {% else %}
    {% if controller.error %}<div class="alert alert-danger">{{ controller.error }}</div>{% endif %}
    {% set form = controller.form %}
    <div class="row g-4">
      <div class="col-lg-8">
        <form method="post" class="card p-4">
          <label class="form-label" for="patient_id">Patient</label>
          <select class="form-select mb-3" id="patient_id" name="patient_id">
            <option value="">Select a patient</option>
            {% for patient in controller.patients %}
              <option value="{{ patient.id }}" {% if patient.id == form.patient_id %}selected{% endif %}>{{ patient.name }}</option>
            {% endfor %}
          </select>
          <div class="row g-3 mb-3">
            <div class="col-md-6">
              <label class="form-label" for="date">Date</label>
              <input class="form-control" id="date" name="date" type="date" value="{{ form.date }}" required>
            </div>
            <div class="col-md-6">
              <label class="form-label" for="time">Time</label>
              <input class="form-control" id="time" name="time" type="time" value="{{ form.time }}" required>
            </div>
            <div class="col-md-6">
              <label class="form-label" for="duration">Duration</label>
              <select class="form-select" id="duration" name="duration">
                {% for minutes in controller.duration_choices %}
                  <option value="{{ minutes }}" {% if minutes|string == form.duration %}selected{% endif %}>{{ minutes }} minutes</option>
                {% endfor %}
              </select>
            </div>
            <div class="col-md-6">
              <label class="form-label" for="type">Type</label>
              <select class="form-select" id="type" name="type">
                {% for option in controller.type_choices %}
                  <option value="{{ option }}" {% if option == form.type %}selected{% endif %}>{{ option }}</option>
                {% endfor %}
              </select>
            </div>
          </div>
          <label class="form-label" for="notes">Notes</label>
          <textarea class="form-control mb-3" id="notes" name="notes" rows="3">{{ form.notes }}</textarea>
          <div class="d-flex gap-2">
            <button class="btn btn-outline-secondary" type="submit" name="action" value="preview">Update Summary</button>
            <button class="btn btn-success" type="submit" name="action" value="create">Schedule Appointment</button>
          </div>
        </form>
      </div>
      <div class="col-lg-4">
        <div class="card p-3">
          <h2 class="h5">Appointment Summary</h2>
          <dl class="mb-0">
            <dt>Patient</dt><dd>{{ preview.patient_name or "Not selected" }}</dd>
            <dt>Date &amp; Time</dt><dd>{{ preview.date or "Not set" }} {{ preview.time }}</dd>
            <dt>Duration</dt><dd>{{ preview.duration }}</dd>
            <dt>Type</dt><dd>{{ preview.type }}</dd>
            {% if preview.notes %}<dt>Notes</dt><dd>{{ preview.notes }}</dd>{% endif %}
          </dl>
        </div>
      </div>
    </div>
  {% endif %}
{% endblock %}
"""

TEMPLATES = {
    "base.html": BASE,
    "macros.html": MACROS,
    "loading.html": LOADING,
    "login.html": LOGIN,
    "signup.html": SIGNUP,
    "forgot_password.html": FORGOT_PASSWORD,
    "overview.html": OVERVIEW,
    "patients.html": PATIENTS,
    "patient_detail.html": PATIENT_DETAIL,
    "patient_new.html": PATIENT_NEW,
    "appointments.html": APPOINTMENTS,
    "appointment_detail.html": APPOINTMENT_DETAIL,
    "appointment_new.html": APPOINTMENT_NEW,
}
