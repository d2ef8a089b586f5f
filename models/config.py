from mongoengine import Document, StringField, DateTimeField

from utils.dates import utcnow


class Config(Document):
    """Runtime settings editable without a redeploy (currency symbol, usage policy)."""
    key = StringField(required=True, unique=True)
    value = StringField(required=True)
    updated_at = DateTimeField(default=utcnow)

    meta = {"collection": "config"}
