from flask_wtf import FlaskForm
from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired

from ..utils.validators import StrictIntegerField, string_value


class TranscribeForm(FlaskForm):
    class Meta:
        csrf = False

    project_id = StrictIntegerField("project_id", validators=[InputRequired()])


class NarrationForm(FlaskForm):
    class Meta:
        csrf = False

    text = TextAreaField("text", validators=[string_value, DataRequired()])
    voice_id = StringField("voice_id", validators=[string_value, DataRequired()])
