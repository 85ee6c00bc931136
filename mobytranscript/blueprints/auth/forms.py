from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired

from ...utils.validators import string_value


class SessionForm(FlaskForm):
    class Meta:
        csrf = False

    code = StringField("code", validators=[string_value, DataRequired(message="Authorization code not provided")])
