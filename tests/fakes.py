"""Fake collaborators for the record store, model, identity provider and mailer."""

from medtech_api.services.identity import Account
from medtech_api.services.model_client import ModelResponse
from medtech_api.services.records import InMemoryRecordStore


class FakeModelClient:
    """Returns canned predictions and remembers every submitted batch."""

    def __init__(self, predictions=None, metadata=None, error=None):
        self.predictions = predictions
        self.metadata = metadata if metadata is not None else {"type": "data", "endpoint": "/predict"}
        self.error = error
        self.batches = []

    async def predict(self, batch):
        self.batches.append(list(batch))
        if self.error is not None:
            raise self.error
        predictions = self.predictions
        if predictions is None:
            predictions = [{"risk": "low"} for _ in batch]
        return ModelResponse(predictions=list(predictions), metadata=dict(self.metadata))


class FailingRecordStore:
    def __init__(self, error):
        self.error = error
        self.calls = 0

    async def fetch_all_service_records(self):
        self.calls += 1
        raise self.error


class CountingRecordStore(InMemoryRecordStore):
    def __init__(self, records=()):
        super().__init__(records)
        self.calls = 0

    async def fetch_all_service_records(self):
        self.calls += 1
        return await super().fetch_all_service_records()


class FakeMailer:
    def __init__(self, error=None):
        self.sent = []
        self.error = error

    async def send(self, to, subject, html, sender_name=None):
        if self.error is not None:
            raise self.error
        self.sent.append({"to": to, "subject": subject, "html": html, "sender_name": sender_name})


class FakeIdentityProvider:
    def __init__(self, users=None, error=None):
        self.users = dict(users or {})
        self.error = error
        self.created = []

    async def create_technician(self, email, name):
        if self.error is not None:
            raise self.error
        account = Account(uid=f"uid-{len(self.created) + 1}", email=email, display_name=name)
        self.created.append(account)
        self.users[email] = account
        return account

    async def get_user_by_email(self, email):
        if self.error is not None:
            raise self.error
        return self.users[email]

    async def generate_password_reset_link(self, email):
        return f"https://auth.example.com/reset?email={email}"
