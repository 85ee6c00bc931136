from flask import current_app, jsonify, request
from flask_login import login_required, current_user
from . import bp
from .forms import SessionForm
from ...services.users_service import (
    UsersServiceError,
    delete_session,
    exchange_code_for_session_token,
    get_oauth_redirect_url,
)
from ...utils.decorators import json_object_required


def _set_session_cookie(resp, token, max_age):
    resp.set_cookie(
        current_app.config['USERS_SESSION_COOKIE'],
        token,
        httponly=True,
        path="/",
        samesite="None",
        secure=True,
        max_age=max_age,
    )
    return resp


@bp.get("/oauth/google/redirect_url")
def oauth_redirect_url():
    try:
        redirect_url = get_oauth_redirect_url("google")
    except UsersServiceError as e:
        current_app.logger.exception('OAuth redirect url lookup failed')
        return jsonify({"error": str(e)}), 502
    return jsonify({"redirectUrl": redirect_url}), 200


@bp.post("/sessions")
@json_object_required
def create_session():
    form = SessionForm()
    if not form.validate_on_submit():
        return jsonify({"error": "Authorization code not provided"}), 400
    try:
        token = exchange_code_for_session_token(form.code.data)
    except UsersServiceError as e:
        current_app.logger.warning('Session exchange failed: %s', e)
        return jsonify({"error": "Could not create session"}), 401
    resp = jsonify({"success": True})
    return _set_session_cookie(resp, token, current_app.config['USERS_SESSION_MAX_AGE'])


@bp.get("/users/me")
@login_required
def me():
    return jsonify(current_user.to_dict())


@bp.get("/logout")
def logout():
    token = request.cookies.get(current_app.config['USERS_SESSION_COOKIE'])
    if token:
        try:
            delete_session(token)
        except UsersServiceError:
            # the cookie is cleared below either way
            current_app.logger.exception('Remote session delete failed')
    resp = jsonify({"success": True})
    return _set_session_cookie(resp, "", 0)
