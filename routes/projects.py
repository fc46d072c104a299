"""Project dashboard blueprint."""
from __future__ import annotations

import logging

from flask import (
    Blueprint,
    abort,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from routes import json_error, wants_json_response

from database import db
from forms import FeatureForm, FeatureStatusForm, ProjectForm
from models.project import Project
from services.project_service import (
    ProjectSummary,
    build_dashboard_context,
    build_project_page_context,
    build_project_summaries,
    get_user_project,
    serialize_feature,
    serialize_project,
)

DEFAULT_FEATURE_LIMIT = 1

projects_bp = Blueprint("projects", __name__, url_prefix="/projects")


def _get_project_or_404(project_id: int) -> Project:
    project = get_user_project(g.user, project_id)
    if project is None:
        abort(404)
    return project


def _render_dashboard(form: ProjectForm):
    context = build_dashboard_context(g.user, project_form=form)
    return render_template("projects.html", **context)


@projects_bp.route("/", methods=["GET"], strict_slashes=False)
def list_projects():
    if wants_json_response():
        summaries = build_project_summaries(g.user)
        return jsonify(
            {
                "success": True,
                "projects": [serialize_project(summary) for summary in summaries],
            }
        )
    return _render_dashboard(ProjectForm())


@projects_bp.route("/", methods=["POST"], strict_slashes=False)
def create_project():
    wants_json = wants_json_response()
    form = ProjectForm()
    if not form.validate_on_submit():
        if wants_json:
            return json_error("Please correct the highlighted fields.", errors=form.errors)
        return _render_dashboard(form)

    project = Project(
        owner_id=g.user.id,
        name=form.name.data.strip(),
        deadline=form.deadline.data,
        feature_limit=form.feature_limit.data or DEFAULT_FEATURE_LIMIT,
    )
    try:
        db.session.add(project)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Database error while adding project", exc_info=True)
        error_message = "Failed to create project."
        if wants_json:
            return json_error(error_message, status=500)
        flash(error_message, "danger")
        return redirect(url_for("projects.list_projects"))

    success_message = f'Project "{project.name}" added!'
    if wants_json:
        return (
            jsonify(
                {
                    "success": True,
                    "message": success_message,
                    "project": serialize_project(ProjectSummary(project)),
                }
            ),
            201,
        )
    flash(success_message, "success")
    return redirect(url_for("projects.list_projects"))


@projects_bp.route("/<int:project_id>", methods=["GET"])
def project_detail(project_id: int):
    project = _get_project_or_404(project_id)
    context = build_project_page_context(
        project,
        feature_form=FeatureForm(),
        status_form=FeatureStatusForm(),
    )
    if wants_json_response():
        return jsonify(
            {
                "success": True,
                "project": serialize_project(context["summary"]),
                "features": [serialize_feature(feature) for feature in context["features"]],
            }
        )
    return render_template("project.html", **context)


@projects_bp.route("/<int:project_id>/delete", methods=["POST"])
def delete_project(project_id: int):
    wants_json = wants_json_response()
    project = _get_project_or_404(project_id)
    name = project.name
    try:
        db.session.delete(project)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Database error while deleting project %s", project_id, exc_info=True)
        error_message = "Failed to delete project."
        if wants_json:
            return json_error(error_message, status=500)
        flash(error_message, "danger")
        return redirect(url_for("projects.list_projects"))

    message = f'Project "{name}" deleted!'
    if wants_json:
        return jsonify({"success": True, "message": message})
    flash(message, "success")
    return redirect(url_for("projects.list_projects"))
