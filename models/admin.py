from mongoengine import Document, StringField, EmailField, DateTimeField

from utils.dates import utcnow


class Admin(Document):
    email = EmailField(required=True, unique=True)
    name = StringField()  # shown next to the promo codes this admin issued
    created_at = DateTimeField(default=utcnow)

    meta = {"collection": "admins"}
