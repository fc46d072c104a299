"""Feature management blueprint.

Feature creation is gated by ScopeLock: once the number of open features of a
project reaches its feature limit, new features are refused until one is done.
The check runs here, against the features loaded at submission time.
"""
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
    request,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from routes import json_error, safe_redirect, wants_json_response

from database import db
from forms import FeatureForm, FeatureStatusForm
from models.feature import Feature
from services.project_service import (
    SCOPE_LOCK_MESSAGE,
    build_project_page_context,
    get_project_features,
    get_user_feature,
    get_user_project,
    serialize_feature,
)
from services.status_service import count_open_features, is_scope_locked

features_bp = Blueprint("features", __name__)


def _get_feature_or_404(feature_id: int) -> Feature:
    feature = get_user_feature(g.user, feature_id)
    if feature is None:
        abort(404)
    return feature


def _redirect_to_project(project_id: int):
    return redirect(url_for("projects.project_detail", project_id=project_id))


@features_bp.route("/projects/<int:project_id>/features", methods=["POST"])
def create_feature(project_id: int):
    wants_json = wants_json_response()
    project = get_user_project(g.user, project_id)
    if project is None:
        abort(404)

    current_features = get_project_features(project)
    if is_scope_locked(current_features, project.feature_limit):
        logging.info(
            "ScopeLock refused feature for project %s (%s/%s open)",
            project.id,
            count_open_features(current_features),
            project.feature_limit,
        )
        if wants_json:
            return json_error(SCOPE_LOCK_MESSAGE, status=409, scope_locked=True)
        flash(SCOPE_LOCK_MESSAGE, "danger")
        return _redirect_to_project(project.id)

    form = FeatureForm()
    if not form.validate_on_submit():
        if wants_json:
            return json_error("Please correct the highlighted fields.", errors=form.errors)
        context = build_project_page_context(
            project,
            feature_form=form,
            status_form=FeatureStatusForm(),
        )
        return render_template("project.html", **context)

    feature = Feature(
        owner_id=g.user.id,
        project_id=project.id,
        title=form.title.data.strip(),
        status=form.status.data,
    )
    try:
        db.session.add(feature)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Database error while adding feature", exc_info=True)
        error_message = "Failed to create feature."
        if wants_json:
            return json_error(error_message, status=500)
        flash(error_message, "danger")
        return _redirect_to_project(project.id)

    success_message = f'Feature "{feature.title}" added!'
    if wants_json:
        return (
            jsonify(
                {
                    "success": True,
                    "message": success_message,
                    "feature": serialize_feature(feature),
                }
            ),
            201,
        )
    flash(success_message, "success")
    return _redirect_to_project(project.id)


@features_bp.route("/features/<int:feature_id>/status", methods=["POST"])
def update_feature_status(feature_id: int):
    wants_json = wants_json_response()
    feature = _get_feature_or_404(feature_id)
    form = FeatureStatusForm()
    if not form.validate_on_submit():
        message = "Please choose a valid status."
        if wants_json:
            return json_error(message, errors=form.errors)
        flash(message, "warning")
        return _redirect_to_project(feature.project_id)

    feature.status = form.status.data
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Database error while updating feature %s", feature_id, exc_info=True)
        error_message = "Failed to update feature."
        if wants_json:
            return json_error(error_message, status=500)
        flash(error_message, "danger")
        return _redirect_to_project(feature.project_id)

    message = f'Feature "{feature.title}" updated!'
    if wants_json:
        return jsonify({"success": True, "message": message, "feature": serialize_feature(feature)})
    flash(message, "success")
    return safe_redirect(
        request.referrer,
        "projects.project_detail",
        project_id=feature.project_id,
    )


@features_bp.route("/features/<int:feature_id>/delete", methods=["POST"])
def delete_feature(feature_id: int):
    wants_json = wants_json_response()
    feature = _get_feature_or_404(feature_id)
    project_id = feature.project_id
    title = feature.title
    try:
        db.session.delete(feature)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logging.error("Database error while deleting feature %s", feature_id, exc_info=True)
        error_message = "Failed to delete feature."
        if wants_json:
            return json_error(error_message, status=500)
        flash(error_message, "danger")
        return _redirect_to_project(project_id)

    message = f'Feature "{title}" deleted!'
    if wants_json:
        return jsonify({"success": True, "message": message})
    flash(message, "success")
    return _redirect_to_project(project_id)
