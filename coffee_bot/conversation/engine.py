"""
Conversation Engine for Coffee Bot
==================================

Interprets each inbound event against the caller's Session and the
menu/ledger, and returns the replies to send.

States:
-------
The state of a user is ``Session.awaiting`` plus the pending selections:

    Idle                    awaiting=NONE, nothing selected
    BrowsingMenu            drink list shown, nothing selected yet
    AwaitingPayment         selected_drink set
    AwaitingPassword        awaiting=PASSWORD
    AwaitingNewDrinkSpec    awaiting=NEW_DRINK_SPEC
    AwaitingEditStatsName   awaiting=EDIT_STATS_NAME
    AwaitingEditStatsCount  awaiting=EDIT_STATS_COUNT, edit_target_drink set

Every state returns to Idle within two further events.

Routing Rules:
--------------
- ``/start`` always drops pending state and shows the main menu.
- Other text is routed by ``awaiting``; with nothing awaited it is ignored.
- A button press abandons any pending free-text question before its own
  handler runs. Unknown action ids are ignored.
- Admin actions (add/remove drink, undo, edit stats) check
  ``Session.is_admin`` here, not just the visibility of the button.

Error Handling:
---------------
ConversationError subclasses become a failure reply and the session, already
moved back toward Idle by the handler, is saved. Any other exception
(database failures included) propagates and the stored session stays as it
was before the event, so the user can simply retry.
"""

import logging
from datetime import date
from typing import Callable, List, Optional

from .. import config
from ..auth import check_admin_secret
from ..errors import AdminRequired, ConversationError, DrinkNotFound, NoDrinkSelected, NoLastOrder
from ..services.ledger import Ledger, LedgerRow
from ..services.menu_store import MenuStore
from ..services.session import Awaiting, LastOrder, Session, SessionStore
from . import actions, keyboards
from .events import ButtonPress, InboundEvent, Keyboard, MessageEvent, OutboundEffect
from .messages import BotMessages
from .parsing import parse_drink_spec, parse_positive_count


logger = logging.getLogger(__name__)

START_COMMAND = "/start"


class ConversationEngine:
    """Per-event state machine over a MenuStore, a Ledger and a SessionStore."""

    def __init__(
        self,
        menu: MenuStore,
        ledger: Ledger,
        sessions: SessionStore,
        admin_secret: Optional[str] = None,
        today: Optional[Callable[[], date]] = None,
        currency: Optional[str] = None,
        correction_price_policy: Optional[str] = None,
    ):
        self.menu = menu
        self.ledger = ledger
        self.sessions = sessions
        self.admin_secret = config.ADMIN_PASSWORD if admin_secret is None else admin_secret
        self.today = today or config.ledger_today
        self.currency = currency or config.CURRENCY_LABEL
        self.correction_price_policy = correction_price_policy or config.CORRECTION_PRICE_POLICY

        self._text_handlers = {
            Awaiting.PASSWORD: self._on_password,
            Awaiting.NEW_DRINK_SPEC: self._on_new_drink_spec,
            Awaiting.EDIT_STATS_NAME: self._on_edit_stats_name,
            Awaiting.EDIT_STATS_COUNT: self._on_edit_stats_count,
        }
        self._button_handlers = {
            actions.CHOOSE_COFFEE: self._on_choose_coffee,
            actions.ORDER: self._on_order,
            actions.PAY: self._on_pay,
            actions.STATS: self._on_stats,
            actions.ENTER_PASSWORD: self._on_enter_password,
            actions.ADD_COFFEE: self._on_add_coffee,
            actions.REMOVE_COFFEE: self._on_remove_coffee,
            actions.DELETE_COFFEE: self._on_delete_coffee,
            actions.UNDO_ORDER: self._on_undo_order,
            actions.EDIT_STATS: self._on_edit_stats,
            actions.BACK_MAIN: self._on_back_main,
        }

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def handle(self, event: InboundEvent) -> List[OutboundEffect]:
        """
        Process one event for ``event.user_id`` and return the replies.

        The caller must not process two events of the same user concurrently
        (see SessionStore.user_lock).
        """
        user_id = event.user_id
        session = self.sessions.get_or_create(user_id)

        try:
            if isinstance(event, MessageEvent):
                replies = self._handle_message(session, event.text)
            elif isinstance(event, ButtonPress):
                replies = self._handle_button(session, event.action)
            else:
                raise TypeError(f"Unsupported event type: {type(event).__name__}")
        except ConversationError as exc:
            logger.info("User %s: %s (%s)", user_id, type(exc).__name__, exc.message)
            replies = [(BotMessages.FAILURE.format(reason=exc.message), self._home_keyboard(session))]

        self.sessions.save(user_id, session)
        return [OutboundEffect(user_id, text, keyboard) for text, keyboard in replies]

    def _handle_message(self, session: Session, text: str):
        text = (text or "").strip()

        if text == START_COMMAND:
            session.reset_pending()
            return [(BotMessages.WELCOME, keyboards.main_menu())]

        handler = self._text_handlers.get(session.awaiting)
        if handler is None:
            logger.debug("Ignoring text with nothing awaited")
            return []
        return handler(session, text)

    def _handle_button(self, session: Session, action_id: str):
        parsed = actions.parse_action(action_id)
        handler = self._button_handlers.get(parsed.name)
        if handler is None:
            logger.debug("Ignoring unknown action %r", action_id)
            return []

        # A button press abandons any pending free-text question
        session.awaiting = Awaiting.NONE
        session.edit_target_drink = None

        if parsed.name in actions.ADMIN_ACTIONS and not session.is_admin:
            raise AdminRequired()

        logger.debug("Routing action %r", action_id)
        return handler(session, parsed.argument)

    def _home_keyboard(self, session: Session) -> Keyboard:
        return keyboards.admin_menu() if session.is_admin else keyboards.main_menu()

    # -------------------------------------------------------------------------
    # Free-text answers
    # -------------------------------------------------------------------------

    def _on_password(self, session: Session, text: str):
        session.awaiting = Awaiting.NONE
        if check_admin_secret(text, self.admin_secret):
            session.is_admin = True
            logger.info("Admin mode granted")
            return [(BotMessages.PASSWORD_OK, keyboards.admin_menu())]

        session.is_admin = False
        logger.warning("Rejected admin password attempt")
        return [(BotMessages.PASSWORD_WRONG, keyboards.main_menu())]

    def _on_new_drink_spec(self, session: Session, text: str):
        session.awaiting = Awaiting.NONE
        name, price = parse_drink_spec(text)
        key = self.menu.upsert(name, price)
        item = self.menu.get(key)
        return [(
            BotMessages.DRINK_ADDED.format(name=item.name, price=item.price, currency=self.currency),
            keyboards.admin_menu(),
        )]

    def _on_edit_stats_name(self, session: Session, text: str):
        session.awaiting = Awaiting.NONE
        item = self.menu.find_by_name(text)
        if item is None:
            raise DrinkNotFound(text)

        session.edit_target_drink = item.key
        session.awaiting = Awaiting.EDIT_STATS_COUNT
        return [(BotMessages.EDIT_DRINK_FOUND.format(name=item.name), None)]

    def _on_edit_stats_count(self, session: Session, text: str):
        target = session.edit_target_drink
        session.awaiting = Awaiting.NONE
        session.edit_target_drink = None

        count = parse_positive_count(text)
        if target is None:
            raise NoDrinkSelected()

        day = self.today()
        price_for = self._correction_price(target)
        removed = self.ledger.decrement_drink(day, target, count, price_for)

        if self.ledger.records_for_drink(day, target):
            text = BotMessages.STATS_REDUCED.format(count=removed)
        else:
            text = BotMessages.STATS_CLEARED
        return [(text, keyboards.admin_menu())]

    def _correction_price(self, drink_key: str) -> Callable[[LedgerRow], int]:
        """Unit price to subtract per corrected order, per CORRECTION_PRICE_POLICY."""
        if self.correction_price_policy == config.CORRECTION_PRICE_POLICY_MENU:
            price = self.menu.get(drink_key).price
            return lambda row: price
        return lambda row: row.revenue // row.count if row.count else 0

    # -------------------------------------------------------------------------
    # Buttons
    # -------------------------------------------------------------------------

    def _on_back_main(self, session: Session, _argument):
        session.reset_pending()
        return [(BotMessages.BACK_TO_MAIN, keyboards.main_menu())]

    def _on_choose_coffee(self, session: Session, _argument):
        session.selected_drink = None
        items = self.menu.list()
        if not items:
            return [(BotMessages.MENU_EMPTY, keyboards.main_menu())]
        return [(BotMessages.CHOOSE_DRINK, keyboards.drinks_menu(items, self.currency))]

    def _on_order(self, session: Session, drink_key: str):
        item = self.menu.get(drink_key)
        session.selected_drink = item.key
        return [(
            BotMessages.DRINK_CHOSEN.format(name=item.name, price=item.price, currency=self.currency),
            keyboards.payment_menu(config.PAYMENT_METHODS),
        )]

    def _on_pay(self, session: Session, method: str):
        if method not in config.PAYMENT_METHODS:
            logger.debug("Ignoring unknown payment method %r", method)
            return []

        drink_key = session.selected_drink
        if not drink_key:
            raise NoDrinkSelected()

        session.selected_drink = None
        item = self.menu.get(drink_key)
        day = self.today()
        self.ledger.record_sale(day, item.key, method, item.price)
        session.last_order = LastOrder(day=day, drink_key=item.key, payment=method, unit_price=item.price)

        return [(
            BotMessages.ORDER_ADDED.format(name=item.name, payment=config.PAYMENT_METHODS[method]),
            keyboards.main_menu(),
        )]

    def _on_stats(self, session: Session, _argument):
        day = self.today()
        rows = self.ledger.query(day)
        names = {item.key: item.name for item in self.menu.list()}

        lines = [BotMessages.STATS_HEADER.format(day=day.isoformat())]
        if not rows:
            lines.append(BotMessages.STATS_EMPTY)
        for row in rows:
            lines.append(BotMessages.STATS_LINE.format(
                name=names.get(row.drink_key, row.drink_key),
                payment=config.PAYMENT_METHODS.get(row.payment, row.payment),
                count=row.count,
                revenue=row.revenue,
                currency=self.currency,
            ))
        total = self.ledger.total_revenue(day)
        lines.append("")
        lines.append(BotMessages.STATS_TOTAL.format(total=total, currency=self.currency))

        return [("\n".join(lines), self._home_keyboard(session))]

    def _on_enter_password(self, session: Session, _argument):
        session.awaiting = Awaiting.PASSWORD
        return [(BotMessages.ENTER_PASSWORD, None)]

    def _on_add_coffee(self, session: Session, _argument):
        session.awaiting = Awaiting.NEW_DRINK_SPEC
        return [(BotMessages.ENTER_NEW_DRINK, None)]

    def _on_remove_coffee(self, session: Session, _argument):
        items = self.menu.list()
        if not items:
            return [(BotMessages.MENU_EMPTY, keyboards.admin_menu())]
        return [(BotMessages.CHOOSE_DRINK_TO_DELETE, keyboards.delete_menu(items))]

    def _on_delete_coffee(self, session: Session, drink_key: str):
        self.menu.remove(drink_key)
        return [(BotMessages.DRINK_REMOVED, keyboards.admin_menu())]

    def _on_undo_order(self, session: Session, _argument):
        last = session.last_order
        if last is None:
            raise NoLastOrder()

        # Cleared even if the record is already gone; a database error skips
        # the session save and keeps it.
        session.last_order = None
        self.ledger.decrement_one(last.day, last.drink_key, last.payment, last.unit_price)
        return [(BotMessages.ORDER_UNDONE, keyboards.admin_menu())]

    def _on_edit_stats(self, session: Session, _argument):
        session.awaiting = Awaiting.EDIT_STATS_NAME
        return [(BotMessages.ENTER_EDIT_NAME, None)]
