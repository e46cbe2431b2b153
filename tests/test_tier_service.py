# tests/test_tier_service.py
"""Unit tests for the tier resolver (in-memory and SQL-backed stores)."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from carcheck.database import create_tables
from carcheck.schemas.tier import SubscriptionTier
from carcheck.services.exceptions import InvalidTierError
from carcheck.services.tier_service import (
    InMemoryStateStore,
    SqlStateStore,
    TierChangeNotifier,
    TierResolver,
)

KEY = "userTier"


def make_resolver(initial=None, default_tier="silver"):
    store = InMemoryStateStore(initial)
    notifier = TierChangeNotifier()
    resolver = TierResolver(store, client_id="test", notifier=notifier,
                            storage_key=KEY, default_tier=default_tier)
    return resolver, store, notifier


class TestGetTier:
    def test_stored_value_returned(self):
        resolver, store, _ = make_resolver({KEY: "gold"})
        assert resolver.get_tier() == SubscriptionTier.GOLD
        assert store.writes == 0

    def test_missing_value_defaults_and_persists_once(self):
        resolver, store, _ = make_resolver()
        assert resolver.get_tier() == SubscriptionTier.SILVER
        assert store.data[KEY] == "silver"
        assert store.writes == 1

        resolver.get_tier()
        assert store.writes == 1

    @pytest.mark.parametrize("junk", ["platinum", "", "GOLD", "null"])
    def test_invalid_value_replaced_with_default(self, junk):
        resolver, store, _ = make_resolver({KEY: junk})
        assert resolver.get_tier() == SubscriptionTier.SILVER
        assert store.data[KEY] == "silver"

    def test_configurable_default(self):
        resolver, store, _ = make_resolver(default_tier="basic")
        assert resolver.get_tier() == SubscriptionTier.BASIC
        assert store.data[KEY] == "basic"


class TestSetTier:
    def test_persists_and_notifies(self):
        resolver, store, notifier = make_resolver({KEY: "basic"})
        listener = MagicMock()
        notifier.subscribe(listener)

        assert resolver.set_tier("gold") == SubscriptionTier.GOLD
        assert store.data[KEY] == "gold"
        listener.assert_called_once_with("test", SubscriptionTier.GOLD)
        assert resolver.get_tier() == SubscriptionTier.GOLD

    def test_accepts_enum_member(self):
        resolver, store, _ = make_resolver()
        resolver.set_tier(SubscriptionTier.BASIC)
        assert store.data[KEY] == "basic"

    def test_invalid_value_rejected_without_write(self):
        resolver, store, notifier = make_resolver({KEY: "silver"})
        listener = MagicMock()
        notifier.subscribe(listener)

        with pytest.raises(InvalidTierError) as exc:
            resolver.set_tier("platinum")

        assert exc.value.status_code == 422
        assert store.data[KEY] == "silver"
        assert store.writes == 0
        listener.assert_not_called()

    def test_unsubscribe_stops_notifications(self):
        resolver, _, notifier = make_resolver()
        listener = MagicMock()
        unsubscribe = notifier.subscribe(listener)
        unsubscribe()

        resolver.set_tier("gold")
        listener.assert_not_called()


class TestSqlStateStore:
    @pytest.fixture
    def db(self):
        engine = create_engine("sqlite://")
        create_tables(bind=engine)
        session = sessionmaker(bind=engine)()
        yield session
        session.close()

    def test_round_trip(self, db):
        store = SqlStateStore(db, "alice")
        assert store.get(KEY) is None
        store.set(KEY, "gold")
        store.set(KEY, "basic")
        assert store.get(KEY) == "basic"

    def test_clients_are_isolated(self, db):
        SqlStateStore(db, "alice").set(KEY, "gold")
        assert SqlStateStore(db, "bob").get(KEY) is None

    def test_resolver_persists_default_in_table(self, db):
        resolver = TierResolver(SqlStateStore(db, "carol"), client_id="carol",
                                notifier=TierChangeNotifier(), storage_key=KEY, default_tier="silver")
        assert resolver.get_tier() == SubscriptionTier.SILVER
        assert SqlStateStore(db, "carol").get(KEY) == "silver"
