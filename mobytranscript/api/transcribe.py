# mobytranscript/api/transcribe.py
from flask import Blueprint, Response, current_app, jsonify, request
from flask_login import login_required, current_user
from ..extensions import db, project_locks, TranscriptionInProgress
from ..models.project import Project
from ..services.media import MediaUnavailableError, UnsupportedMediaError
from ..services.narration import NarrationError, NarrationNotConfigured, synthesize
from ..services.orchestrator import TranscriptionFailed, TranscriptionOrchestrator, transcribe_project
from ..services.providers import build_providers
from ..services.subtitles import CONTENT_TYPES, FORMATS, SubtitlesUnavailable, export_subtitles
from ..utils.decorators import json_object_required
from .forms import NarrationForm, TranscribeForm

bp = Blueprint("transcribe", __name__)

UNEXPECTED_ERROR = "Unexpected error during transcription"


@bp.post("/transcribe")
@login_required
@json_object_required
def transcribe():
    form = TranscribeForm()
    if not form.validate_on_submit():
        return jsonify({"error": "project_id is required"}), 400

    p = Project.owned_by(current_user.id).filter_by(id=form.project_id.data).first()
    if not p:
        return jsonify({"error": "Project not found"}), 404

    try:
        with project_locks.hold(p.id):
            orchestrator = TranscriptionOrchestrator(build_providers(current_app.config), logger=current_app.logger)
            result = transcribe_project(p, orchestrator)
    except TranscriptionInProgress:
        return jsonify({"error": "A transcription for this project is already running"}), 409
    except (UnsupportedMediaError, MediaUnavailableError) as e:
        return jsonify({"error": str(e)}), 400
    except TranscriptionFailed as e:
        current_app.logger.error('Project %s: all providers failed: %s', p.id, e.errors)
        return jsonify({"error": e.message}), 502
    except Exception as e:
        current_app.logger.exception('Transcription of project %s failed unexpectedly', p.id)
        db.session.rollback()
        try:
            p.record_error(str(e) or UNEXPECTED_ERROR)
            db.session.commit()
        except Exception:
            db.session.rollback()
            current_app.logger.exception('Failed to persist last_error for project %s', p.id)
        return jsonify({"error": UNEXPECTED_ERROR}), 500

    return jsonify(result.to_dict())


@bp.get("/subtitles/<fmt>")
@login_required
def subtitles(fmt):
    if fmt not in FORMATS:
        return jsonify({"error": "Invalid format"}), 400

    transcript_id = request.args.get("transcript_id") or None
    project_id = request.args.get("project_id", type=int)
    project = None
    if project_id is not None:
        project = Project.owned_by(current_user.id).filter_by(id=project_id).first()
        if project is not None and not transcript_id:
            transcript_id = project.transcript_id

    try:
        content = export_subtitles(
            fmt,
            project=project,
            transcript_id=transcript_id,
            api_key=current_app.config.get("ASSEMBLYAI_API_KEY"),
            logger=current_app.logger,
        )
    except SubtitlesUnavailable:
        return jsonify({"error": "Subtitles unavailable"}), 404

    return Response(content, status=200, mimetype=CONTENT_TYPES[fmt], headers={
        "Content-Disposition": f'attachment; filename="subtitles.{fmt}"',
    })


@bp.post("/tts")
@login_required
@json_object_required
def tts():
    form = NarrationForm()
    if not form.validate_on_submit():
        return jsonify({"error": "text and voice_id are required"}), 400

    try:
        audio = synthesize(
            form.text.data,
            form.voice_id.data,
            current_app.config.get("ELEVENLABS_API_KEY"),
            model_id=current_app.config.get("ELEVENLABS_MODEL_ID", "eleven_multilingual_v2"),
        )
    except NarrationNotConfigured as e:
        return jsonify({"error": str(e)}), 400
    except NarrationError as e:
        current_app.logger.warning('Narration failed: %s', e)
        return jsonify({"error": str(e)}), 500

    return Response(audio, status=200, mimetype="audio/mpeg", headers={
        "Content-Disposition": 'attachment; filename="narration.mp3"',
    })
