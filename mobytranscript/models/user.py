from flask_login import UserMixin


class User(UserMixin):
    """A user as reported by the hosted users service; not stored locally."""

    def __init__(self, id, email=None, name=None, raw=None):
        self.id = str(id)
        self.email = email
        self.name = name
        self.raw = raw or {}

    @classmethod
    def from_service(cls, data):
        profile = data.get('google_user_data') or {}
        return cls(
            id=data['id'],
            email=data.get('email') or profile.get('email'),
            name=profile.get('name') or data.get('name'),
            raw=data,
        )

    def to_dict(self):
        return dict(self.raw) if self.raw else {'id': self.id, 'email': self.email, 'name': self.name}
