from urllib.parse import urlparse

from flask_wtf import FlaskForm
from wtforms import StringField, SelectField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional, ValidationError

from ...models.project import SOURCE_TYPES
from ...utils.validators import string_value


class ProjectForm(FlaskForm):
    class Meta:
        csrf = False

    title = StringField("title", validators=[string_value, DataRequired(message="Title is required"), Length(max=255)])
    source_type = SelectField("source_type", choices=[(t, t) for t in SOURCE_TYPES])
    source_url = StringField("source_url", validators=[string_value])

    def validate_source_url(self, field):
        if self.source_type.data != "url":
            return
        value = str(field.data or "").strip()
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError("source_url must be an http(s) URL")


class ProjectUpdateForm(FlaskForm):
    """Partial update: only keys present in the body are applied."""

    class Meta:
        csrf = False

    title = StringField("title", validators=[Optional(), string_value, Length(max=255)])
    transcript_text = TextAreaField("transcript_text", validators=[Optional(), string_value])
