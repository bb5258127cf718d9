"""
Tests for the ConversationEngine state machine.

The engine fixture runs on an in-memory database with a fixed business
date, TODAY.
"""
from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from coffee_bot.conversation import ButtonPress, ConversationEngine, MessageEvent
from coffee_bot.conversation.messages import BotMessages
from coffee_bot.errors import AdminRequired, BadFormat, BadPrice, NoDrinkSelected, NoLastOrder
from coffee_bot.services.ledger import Ledger, LedgerRow
from coffee_bot.services.session import Awaiting

USER = 1001
TODAY = date(2026, 3, 14)
TEST_ADMIN_PASSWORD = "s3cret-beans"


@pytest.fixture
def engine(menu, ledger, sessions):
    """ConversationEngine with a fixed business date and admin secret."""
    return ConversationEngine(
        menu,
        ledger,
        sessions,
        admin_secret=TEST_ADMIN_PASSWORD,
        today=lambda: TODAY,
        currency="UAH",
        correction_price_policy="sale",
    )


def say(engine, text, user_id=USER):
    return engine.handle(MessageEvent(user_id=user_id, text=text))


def press(engine, action, user_id=USER):
    return engine.handle(ButtonPress(user_id=user_id, action=action))


def login(engine, user_id=USER):
    press(engine, "enter_password", user_id)
    return say(engine, TEST_ADMIN_PASSWORD, user_id)


def failure(error_cls):
    return BotMessages.FAILURE.format(reason=error_cls().message)


def buy(engine, drink_key, payment, user_id=USER):
    press(engine, "choose_coffee", user_id)
    press(engine, f"order_{drink_key}", user_id)
    return press(engine, f"pay_{payment}", user_id)


class TestStartAndNavigation:
    """Test /start, back and ignored input."""

    def test_start_shows_main_menu(self, engine):
        effects = say(engine, "/start")

        assert len(effects) == 1
        assert effects[0].user_id == USER
        assert effects[0].text == BotMessages.WELCOME
        assert effects[0].keyboard.actions() == ["choose_coffee", "stats", "enter_password"]

    def test_text_while_idle_is_ignored(self, engine, sessions):
        assert say(engine, "hello there") == []
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_unknown_action_is_ignored(self, engine):
        assert press(engine, "make_tea") == []

    def test_start_drops_pending_question(self, engine, sessions):
        press(engine, "enter_password")
        say(engine, "/start")

        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE
        # The secret typed now is plain idle text
        assert say(engine, TEST_ADMIN_PASSWORD) == []
        assert sessions.get_or_create(USER).is_admin is False

    def test_back_discards_selection(self, engine, menu, sessions):
        menu.upsert("Latte", 45)
        press(engine, "choose_coffee")
        press(engine, "order_latte")

        effects = press(engine, "back_main")

        assert effects[0].text == BotMessages.BACK_TO_MAIN
        assert sessions.get_or_create(USER).selected_drink is None


class TestAdminLogin:
    """Test password handling and admin gating."""

    def test_correct_password_grants_admin(self, engine, sessions):
        effects = login(engine)

        assert effects[0].text == BotMessages.PASSWORD_OK
        assert "add_coffee" in effects[0].keyboard.actions()
        session = sessions.get_or_create(USER)
        assert session.is_admin is True
        assert session.awaiting is Awaiting.NONE

    def test_wrong_password(self, engine, sessions):
        press(engine, "enter_password")
        effects = say(engine, "guess")

        assert effects[0].text == BotMessages.PASSWORD_WRONG
        assert sessions.get_or_create(USER).is_admin is False
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_password_is_exact_match(self, engine, sessions):
        press(engine, "enter_password")
        say(engine, TEST_ADMIN_PASSWORD.upper())

        assert sessions.get_or_create(USER).is_admin is False

    def test_wrong_password_revokes_admin(self, engine, sessions):
        login(engine)
        press(engine, "enter_password")
        say(engine, "guess")

        assert sessions.get_or_create(USER).is_admin is False

    def test_empty_secret_never_grants_admin(self, menu, ledger, sessions):
        engine = ConversationEngine(menu, ledger, sessions, admin_secret="", today=lambda: TODAY)
        press(engine, "enter_password")
        say(engine, "")

        assert sessions.get_or_create(USER).is_admin is False

    @pytest.mark.parametrize(
        "action",
        ["add_coffee", "remove_coffee", "delete_coffee_latte", "undo_order", "edit_stats"],
    )
    def test_admin_actions_require_login(self, engine, menu, sessions, action):
        menu.upsert("Latte", 45)

        effects = press(engine, action)

        assert effects[0].text == failure(AdminRequired)
        assert effects[0].keyboard.actions() == ["choose_coffee", "stats", "enter_password"]
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE
        # Crafted delete action must not touch the menu
        assert menu.find_by_name("Latte") is not None

    def test_admin_is_per_user(self, engine, sessions):
        login(engine, user_id=1)

        effects = press(engine, "add_coffee", user_id=2)

        assert effects[0].text == failure(AdminRequired)

    def test_back_keeps_admin(self, engine, sessions):
        login(engine)
        press(engine, "back_main")

        assert sessions.get_or_create(USER).is_admin is True


class TestMenuManagement:
    """Test adding and removing drinks through the chat."""

    def test_add_drink(self, engine, menu, sessions):
        login(engine)
        press(engine, "add_coffee")
        assert sessions.get_or_create(USER).awaiting is Awaiting.NEW_DRINK_SPEC

        effects = say(engine, "Latte - 45")

        assert effects[0].text == BotMessages.DRINK_ADDED.format(name="Latte", price=45, currency="UAH")
        assert menu.get("latte").price == 45
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_spec_without_dash_is_bad_format(self, engine, menu, sessions):
        login(engine)
        press(engine, "add_coffee")

        effects = say(engine, "Latte 45")

        assert effects[0].text == failure(BadFormat)
        assert menu.list() == []
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_spec_with_bad_price(self, engine, menu):
        login(engine)
        press(engine, "add_coffee")

        effects = say(engine, "Latte - cheap")

        assert effects[0].text.startswith("⛔")
        assert menu.list() == []

    def test_spec_with_price_above_column_limit(self, engine, menu, sessions):
        login(engine)
        press(engine, "add_coffee")

        effects = say(engine, "Latte - 99999999999999999999")

        assert effects[0].text == failure(BadPrice)
        assert menu.list() == []
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_remove_drink(self, engine, menu):
        menu.upsert("Latte", 45)
        menu.upsert("Mocha", 50)
        login(engine)

        listing = press(engine, "remove_coffee")
        assert listing[0].keyboard.actions() == ["delete_coffee_latte", "delete_coffee_mocha", "back_main"]

        effects = press(engine, "delete_coffee_latte")

        assert effects[0].text == BotMessages.DRINK_REMOVED
        assert [i.key for i in menu.list()] == ["mocha"]

    def test_remove_absent_drink_succeeds(self, engine):
        login(engine)

        effects = press(engine, "delete_coffee_ghost")

        assert effects[0].text == BotMessages.DRINK_REMOVED

    def test_other_button_abandons_pending_spec(self, engine, menu, sessions):
        login(engine)
        press(engine, "add_coffee")
        press(engine, "stats")

        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE
        assert say(engine, "Latte - 45") == []
        assert menu.list() == []


class TestOrdering:
    """Test browsing, selecting and paying."""

    def test_browse_lists_drinks(self, engine, menu):
        menu.upsert("Latte", 45)
        menu.upsert("Flat White", 55)

        effects = press(engine, "choose_coffee")

        assert effects[0].text == BotMessages.CHOOSE_DRINK
        assert effects[0].keyboard.actions() == ["order_flat_white", "order_latte", "back_main"]

    def test_browse_empty_menu(self, engine):
        effects = press(engine, "choose_coffee")

        assert effects[0].text == BotMessages.MENU_EMPTY

    def test_select_then_pay_records_sale(self, engine, menu, ledger, sessions):
        menu.upsert("Latte", 45)
        press(engine, "choose_coffee")

        chosen = press(engine, "order_latte")
        assert chosen[0].keyboard.actions() == ["pay_cash", "pay_card", "choose_coffee"]
        assert sessions.get_or_create(USER).selected_drink == "latte"

        effects = press(engine, "pay_card")

        assert effects[0].text == BotMessages.ORDER_ADDED.format(name="Latte", payment="Card")
        assert ledger.query(TODAY) == [LedgerRow("latte", "card", 1, 45)]
        session = sessions.get_or_create(USER)
        assert session.selected_drink is None
        assert session.last_order.drink_key == "latte"
        assert session.last_order.payment == "card"
        assert session.last_order.unit_price == 45
        assert session.last_order.day == TODAY

    def test_pay_without_selection(self, engine, ledger):
        effects = press(engine, "pay_cash")

        assert effects[0].text == failure(NoDrinkSelected)
        assert ledger.query(TODAY) == []

    def test_unknown_payment_method_is_ignored(self, engine, menu, ledger, sessions):
        menu.upsert("Latte", 45)
        press(engine, "order_latte")

        assert press(engine, "pay_bitcoin") == []
        assert ledger.query(TODAY) == []
        assert sessions.get_or_create(USER).selected_drink == "latte"

    def test_order_unknown_drink(self, engine):
        effects = press(engine, "order_ghost")

        assert effects[0].text == BotMessages.FAILURE.format(reason="Drink not found in the menu.")

    def test_sale_uses_price_at_payment_time(self, engine, menu, ledger):
        menu.upsert("Latte", 45)
        press(engine, "order_latte")
        menu.upsert("Latte", 50)
        press(engine, "pay_cash")

        assert ledger.query(TODAY) == [LedgerRow("latte", "cash", 1, 50)]


class TestUndo:
    """Test the single-shot undo of the last order."""

    def test_two_sales_then_undo(self, engine, menu, ledger):
        menu.upsert("Latte", 45)
        buy(engine, "latte", "card", user_id=1)
        buy(engine, "latte", "card", user_id=2)
        assert ledger.query(TODAY) == [LedgerRow("latte", "card", 2, 90)]

        login(engine, user_id=2)
        effects = press(engine, "undo_order", user_id=2)

        assert effects[0].text == BotMessages.ORDER_UNDONE
        assert ledger.query(TODAY) == [LedgerRow("latte", "card", 1, 45)]

    def test_undo_is_single_shot(self, engine, menu, ledger):
        menu.upsert("Latte", 45)
        login(engine)
        buy(engine, "latte", "cash")

        first = press(engine, "undo_order")
        second = press(engine, "undo_order")

        assert first[0].text == BotMessages.ORDER_UNDONE
        assert second[0].text == failure(NoLastOrder)
        assert ledger.query(TODAY) == []

    def test_undo_without_order(self, engine):
        login(engine)

        effects = press(engine, "undo_order")

        assert effects[0].text == failure(NoLastOrder)
        assert "undo_order" in effects[0].keyboard.actions()

    def test_undo_when_record_already_gone(self, engine, menu, ledger, sessions):
        menu.upsert("Latte", 45)
        login(engine)
        buy(engine, "latte", "cash")
        ledger.decrement(TODAY, "latte", "cash", 1, 45)

        effects = press(engine, "undo_order")

        assert effects[0].text == BotMessages.FAILURE.format(reason="No stats found for this drink today.")
        assert sessions.get_or_create(USER).last_order is None


class TestEditStats:
    """Test the two-step stats correction flow."""

    def _sell(self, ledger, key, payment, times, price):
        for _ in range(times):
            ledger.record_sale(TODAY, key, payment, price)

    def test_reduce_orders(self, engine, menu, ledger, sessions):
        menu.upsert("Flat White", 55)
        self._sell(ledger, "flat_white", "card", 3, 55)
        login(engine)

        press(engine, "edit_stats")
        found = say(engine, "flat white")
        assert found[0].text == BotMessages.EDIT_DRINK_FOUND.format(name="Flat White")
        session = sessions.get_or_create(USER)
        assert session.awaiting is Awaiting.EDIT_STATS_COUNT
        assert session.edit_target_drink == "flat_white"

        effects = say(engine, "2")

        assert effects[0].text == BotMessages.STATS_REDUCED.format(count=2)
        assert ledger.query(TODAY) == [LedgerRow("flat_white", "card", 1, 55)]
        session = sessions.get_or_create(USER)
        assert session.awaiting is Awaiting.NONE
        assert session.edit_target_drink is None

    def test_clear_all_orders(self, engine, menu, ledger):
        menu.upsert("Latte", 45)
        self._sell(ledger, "latte", "cash", 2, 45)
        login(engine)

        press(engine, "edit_stats")
        say(engine, "Latte")
        effects = say(engine, "5")

        assert effects[0].text == BotMessages.STATS_CLEARED
        assert ledger.query(TODAY) == []

    def test_unknown_drink_name(self, engine, sessions):
        login(engine)
        press(engine, "edit_stats")

        effects = say(engine, "Tea")

        assert effects[0].text == BotMessages.FAILURE.format(reason="Drink not found in the menu.")
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE

    def test_invalid_count(self, engine, menu, ledger, sessions):
        menu.upsert("Latte", 45)
        self._sell(ledger, "latte", "cash", 2, 45)
        login(engine)
        press(engine, "edit_stats")
        say(engine, "Latte")

        effects = say(engine, "zero")

        assert effects[0].text == BotMessages.FAILURE.format(reason="Enter a positive number!")
        assert ledger.query(TODAY) == [LedgerRow("latte", "cash", 2, 90)]
        assert sessions.get_or_create(USER).edit_target_drink is None

    def test_no_stats_today(self, engine, menu):
        menu.upsert("Latte", 45)
        login(engine)
        press(engine, "edit_stats")
        say(engine, "Latte")

        effects = say(engine, "1")

        assert effects[0].text == BotMessages.FAILURE.format(reason="No stats found for this drink today.")

    def test_sale_price_policy_keeps_historical_revenue(self, engine, menu, ledger):
        menu.upsert("Latte", 40)
        self._sell(ledger, "latte", "card", 3, 40)
        menu.upsert("Latte", 60)
        login(engine)

        press(engine, "edit_stats")
        say(engine, "Latte")
        say(engine, "1")

        assert ledger.query(TODAY) == [LedgerRow("latte", "card", 2, 80)]

    def test_menu_price_policy_uses_current_price(self, menu, ledger, sessions):
        engine = ConversationEngine(
            menu, ledger, sessions,
            admin_secret=TEST_ADMIN_PASSWORD,
            today=lambda: TODAY,
            correction_price_policy="menu",
        )
        menu.upsert("Latte", 40)
        self._sell(ledger, "latte", "card", 3, 40)
        menu.upsert("Latte", 60)
        login(engine)

        press(engine, "edit_stats")
        say(engine, "Latte")
        say(engine, "1")

        assert ledger.query(TODAY) == [LedgerRow("latte", "card", 2, 60)]


class TestStats:
    """Test the stats report."""

    def test_empty_day(self, engine):
        effects = press(engine, "stats")

        lines = effects[0].text.split("\n")
        assert lines[0] == BotMessages.STATS_HEADER.format(day=TODAY.isoformat())
        assert BotMessages.STATS_EMPTY in lines
        assert lines[-1] == BotMessages.STATS_TOTAL.format(total=0, currency="UAH")

    def test_lines_and_total(self, engine, menu):
        menu.upsert("Latte", 45)
        menu.upsert("Mocha", 50)
        buy(engine, "latte", "card")
        buy(engine, "latte", "card")
        buy(engine, "mocha", "cash")

        text = press(engine, "stats")[0].text

        assert "☕ Latte (Card) — 2 pcs (90 UAH)" in text
        assert "☕ Mocha (Cash) — 1 pcs (50 UAH)" in text
        assert text.endswith(BotMessages.STATS_TOTAL.format(total=140, currency="UAH"))

    def test_removed_drink_shows_key(self, engine, menu, ledger):
        ledger.record_sale(TODAY, "old_brew", "cash", 30)

        text = press(engine, "stats")[0].text

        assert "old_brew (Cash)" in text

    def test_keyboard_follows_admin_mode(self, engine):
        assert "enter_password" in press(engine, "stats")[0].keyboard.actions()
        login(engine)
        assert "undo_order" in press(engine, "stats")[0].keyboard.actions()


class _FailingLedger(Ledger):
    def record_sale(self, day, drink_key, payment, unit_price):
        raise OperationalError("INSERT INTO stats", {}, Exception("database is locked"))


class TestPersistenceFailure:
    """A storage error propagates and leaves the session as it was."""

    def test_session_unchanged_after_failed_sale(self, db_session, menu, sessions):
        menu.upsert("Latte", 45)
        engine = ConversationEngine(
            menu, _FailingLedger(db_session), sessions,
            admin_secret=TEST_ADMIN_PASSWORD,
            today=lambda: TODAY,
        )
        press(engine, "order_latte")

        with pytest.raises(OperationalError):
            press(engine, "pay_card")

        session = sessions.get_or_create(USER)
        assert session.selected_drink == "latte"
        assert session.last_order is None


class _FailingSecondDecrementLedger(Ledger):
    """Fails the second per-record decrement it is asked for, once."""

    def __init__(self, db):
        super().__init__(db)
        self.calls = 0

    def decrement(self, *args, **kwargs):
        self.calls += 1
        if self.calls == 2:
            raise OperationalError("DELETE FROM stats", {}, Exception("database is locked"))
        return super().decrement(*args, **kwargs)


class TestCorrectionFailure:
    """A failed correction changes nothing, so resending it is safe."""

    def test_resend_after_failure_removes_requested_count_once(self, db_session, menu, sessions):
        ledger = _FailingSecondDecrementLedger(db_session)
        engine = ConversationEngine(
            menu, ledger, sessions,
            admin_secret=TEST_ADMIN_PASSWORD,
            today=lambda: TODAY,
            correction_price_policy="sale",
        )
        menu.upsert("Latte", 45)
        for _ in range(2):
            ledger.record_sale(TODAY, "latte", "card", 45)
            ledger.record_sale(TODAY, "latte", "cash", 45)
        login(engine)
        press(engine, "edit_stats")
        say(engine, "Latte")

        with pytest.raises(OperationalError):
            say(engine, "3")

        assert ledger.query(TODAY) == [
            LedgerRow("latte", "card", 2, 90),
            LedgerRow("latte", "cash", 2, 90),
        ]
        assert sessions.get_or_create(USER).awaiting is Awaiting.EDIT_STATS_COUNT

        effects = say(engine, "3")

        assert effects[0].text == BotMessages.STATS_REDUCED.format(count=3)
        assert ledger.query(TODAY) == [LedgerRow("latte", "cash", 1, 45)]
        assert sessions.get_or_create(USER).awaiting is Awaiting.NONE
