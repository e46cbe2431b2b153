# CarCheck UK — Database Models
# Import all models here for SQLAlchemy discovery

from carcheck.models.client_state import ClientState   # noqa
