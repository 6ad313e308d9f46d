from flask import current_app, g, jsonify, request

from skillsync.blueprints.api import api_bp
from skillsync.jwt_auth import require_jwt
from skillsync.services.resume_management import ResumePipeline
import logging

logger = logging.getLogger(__name__)


def _pipeline() -> ResumePipeline:
    return current_app.extensions["resume_pipeline"]


def _resume_with_skills(resume, skills) -> dict:
    return {
        "resume": resume.to_dict(),
        "extractedSkills": [skill.model_dump() for skill in skills],
    }


@api_bp.route("/resume/upload", methods=["POST"])
@require_jwt(hydrate=True)
def upload_resume():
    """Upload a resume, extract its skills and catalog it."""
    resume, skills = _pipeline().ingest_upload(request.files, request.form, g.user_sub)
    return (
        jsonify(
            {
                "success": True,
                "message": "Resume uploaded and parsed successfully",
                "data": _resume_with_skills(resume, skills),
            }
        ),
        201,
    )


@api_bp.route("/resume", methods=["GET"])
@require_jwt(hydrate=True)
def get_user_resumes():
    """Get all resumes for the current user, newest first"""
    resumes = _pipeline().list_resumes(g.user_sub)
    return jsonify(
        {"success": True, "data": {"resumes": [r.to_dict() for r in resumes]}}
    )


@api_bp.route("/resume/<int:resume_id>", methods=["GET"])
@require_jwt(hydrate=True)
def get_resume(resume_id):
    resume = _pipeline().get_resume(resume_id, g.user_sub)
    return jsonify({"success": True, "data": {"resume": resume.to_dict()}})


@api_bp.route("/resume/<int:resume_id>", methods=["PUT"])
@require_jwt(hydrate=True)
def update_resume(resume_id):
    """Update title/description of a resume owned by the caller"""
    payload = request.get_json(silent=True)
    resume = _pipeline().update_metadata(resume_id, g.user_sub, payload)
    return jsonify(
        {
            "success": True,
            "message": "Resume updated successfully",
            "data": {"resume": resume.to_dict()},
        }
    )


@api_bp.route("/resume/<int:resume_id>", methods=["DELETE"])
@require_jwt(hydrate=True)
def delete_resume(resume_id):
    """Delete a resume row and, best effort, its stored file"""
    _pipeline().delete_resume(resume_id, g.user_sub)
    return jsonify({"success": True, "message": "Resume deleted successfully"})


@api_bp.route("/resume/<int:resume_id>/reanalyze", methods=["POST"])
@require_jwt(hydrate=True)
def reanalyze_resume(resume_id):
    """Re-run skill extraction over the stored resume text"""
    resume, skills = _pipeline().reanalyze(resume_id, g.user_sub)
    logger.debug(f"Reanalysis returned {len(skills)} skills for resume_id={resume_id}")
    return jsonify(
        {
            "success": True,
            "message": "Skills re-analyzed successfully",
            "data": _resume_with_skills(resume, skills),
        }
    )
