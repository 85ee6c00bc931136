from wtforms import IntegerField
from wtforms.validators import StopValidation


def string_value(form, field):
    # JSON bodies can carry numbers, lists or objects where text is expected
    if field.data is not None and not isinstance(field.data, str):
        raise StopValidation("must be a string")


class StrictIntegerField(IntegerField):
    """IntegerField that refuses booleans, lists and objects from JSON bodies."""

    def process_formdata(self, valuelist):
        if valuelist:
            value = valuelist[0]
            if isinstance(value, bool) or not isinstance(value, (int, str)):
                self.data = None
                raise ValueError("must be an integer")
        super().process_formdata(valuelist)
