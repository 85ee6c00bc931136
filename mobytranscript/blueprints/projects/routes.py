import mimetypes
import os
from io import BytesIO

from flask import current_app, jsonify, request, send_file
from flask_login import login_required, current_user
from werkzeug.utils import secure_filename
from . import bp
from .forms import ProjectForm, ProjectUpdateForm
from ...extensions import db
from ...models.project import Project
from ...services.storage import save_file, download_bytes
from ...utils.decorators import json_object_required

ALLOWED = {"flac", "m4a", "mp3", "mp4", "mpeg", "mpga", "oga", "ogg", "wav", "webm"}


def allowed(name):
    return "." in name and name.rsplit(".", 1)[1].lower() in ALLOWED


def _stream_size(file_storage):
    stream = file_storage.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def _get_owned(project_id):
    return Project.owned_by(current_user.id).filter_by(id=project_id).first_or_404(description="Project not found")


def _form_errors(form):
    for field, errors in form.errors.items():
        if errors:
            return f"{field}: {errors[0]}"
    return "Invalid request"


@bp.get("")
@login_required
def list_projects():
    items = Project.owned_by(current_user.id).order_by(Project.created_at.desc(), Project.id.desc()).all()
    return jsonify([p.to_dict() for p in items])


@bp.post("")
@login_required
@json_object_required
def create_project():
    form = ProjectForm()
    if not form.validate_on_submit():
        return jsonify({"error": _form_errors(form)}), 400
    source_url = None
    if form.source_type.data == "url":
        source_url = str(form.source_url.data).strip()
    p = Project(
        user_id=current_user.id,
        title=form.title.data.strip(),
        source_type=form.source_type.data,
        source_url=source_url,
    )
    db.session.add(p)
    db.session.commit()
    current_app.logger.info('Project %s created by user %s (%s)', p.id, current_user.id, p.source_type)
    return jsonify(p.to_dict())


@bp.get("/<int:project_id>")
@login_required
def get_project(project_id):
    return jsonify(_get_owned(project_id).to_dict())


@bp.patch("/<int:project_id>")
@login_required
@json_object_required
def update_project(project_id):
    p = _get_owned(project_id)
    form = ProjectUpdateForm()
    if not form.validate_on_submit():
        return jsonify({"error": _form_errors(form)}), 400
    # raw_data is empty when the key was absent from the body
    if form.title.raw_data:
        title = (form.title.data or "").strip()
        if not title:
            return jsonify({"error": "title: Title is required"}), 400
        p.title = title
    if form.transcript_text.raw_data:
        p.transcript_text = form.transcript_text.data
    p.touch()
    db.session.commit()
    return jsonify(p.to_dict())


@bp.post("/<int:project_id>/upload")
@login_required
def upload_file(project_id):
    p = _get_owned(project_id)

    f = request.files.get("file")
    if f is None or not f.filename:
        return jsonify({"error": "file is required"}), 400

    size = _stream_size(f)
    max_bytes = current_app.config["MAX_UPLOAD_BYTES"]
    if size > max_bytes:
        return jsonify({"error": f"File too large (max {max_bytes // (1024 * 1024)} MB)"}), 413
    # extension decides, whatever MIME type the client declared
    if not allowed(f.filename):
        return jsonify({"error": f"Invalid format. Use: {', '.join(sorted(ALLOWED))}"}), 415

    ext = f.filename.rsplit(".", 1)[1].lower()
    safe = secure_filename(f.filename)
    if "." not in safe:
        safe = f"upload.{ext}"
    mime = f.mimetype or mimetypes.guess_type(safe)[0] or "application/octet-stream"
    key = f"projects/{p.id}/{safe}"
    url = save_file(f, key=key)
    p.attach_file(key, url, f.filename, size, mime)
    db.session.commit()
    current_app.logger.info('Stored %s (%d bytes) for project %s', safe, size, p.id)
    return jsonify({"success": True, "project": p.to_dict()})


@bp.get("/<int:project_id>/file")
@login_required
def get_file(project_id):
    p = Project.owned_by(current_user.id).filter_by(id=project_id).first()
    if not p or not p.file_url:
        return jsonify({"error": "File not found"}), 404
    try:
        data = download_bytes(p.file_url)
    except Exception:
        current_app.logger.exception('Stored file for project %s is missing', p.id)
        return jsonify({"error": "File not found in storage"}), 404
    return send_file(BytesIO(data), mimetype=p.file_mime or "application/octet-stream",
                     download_name=p.file_name or "media")


@bp.get("/<int:project_id>/diagnostic")
@login_required
def diagnostic(project_id):
    p = _get_owned(project_id)
    cfg = current_app.config
    return jsonify({
        "provider_used": p.provider_used,
        "secrets_status": {
            "assemblyai": bool(cfg.get("ASSEMBLYAI_API_KEY")),
            "openai": bool(cfg.get("OPENAI_API_KEY")),
            "elevenlabs": bool(cfg.get("ELEVENLABS_API_KEY")),
            "deepgram": bool(cfg.get("DEEPGRAM_API_KEY")),
        },
        "file_info": {
            "size": p.file_size,
            "mime": p.file_mime,
            "source": p.source_type,
            "has_media": p.has_media(),
        },
        "last_error": p.last_error,
    })
