"""
Live per-user view of medications and today's doses.

A ``DashboardSession`` holds two store subscriptions for one signed-in user.
Each store notification carries the full result set and replaces the local
list wholesale; there is no incremental merge. Sessions are opened when the
user signs in and closed when they sign out, through ``SessionRegistry``.
"""
import functools
import logging
import threading

from medreminder.errors import StoreError
from medreminder.models import Medication, MedicationDose
from medreminder.models.medication import COLLECTION as MEDICATIONS
from medreminder.models.medication_dose import COLLECTION as DOSES

logger = logging.getLogger(__name__)


class DashboardSession:
    def __init__(self, store, user_id):
        self.store = store
        self.user_id = user_id
        self.day = None
        self._medications = []
        self._doses = []
        self._unsub_medications = None
        self._unsub_doses = None
        self._listeners = []
        self._lock = threading.Lock()
        # serialises subscribe and unsubscribe calls
        self._sub_lock = threading.RLock()
        self._medications_ready = threading.Event()
        self._doses_ready = threading.Event()

    @property
    def active(self):
        return self._unsub_medications is not None

    def start(self, today):
        with self._sub_lock:
            if self.active:
                self.ensure_day(today)
                return self
            try:
                self._unsub_medications = self.store.subscribe(
                    MEDICATIONS, {"userId": self.user_id}, self._on_medications
                )
                self._subscribe_doses(today)
            except StoreError:
                self.stop()
                raise
        logger.info("Dashboard session started for user %s (%s)", self.user_id, today)
        return self

    def _subscribe_doses(self, today):
        with self._lock:
            self.day = today
        self._unsub_doses = self.store.subscribe(
            DOSES, {"userId": self.user_id, "date": today}, functools.partial(self._on_doses, today)
        )

    def ensure_day(self, today):
        """Point the dose subscription at ``today`` if the date has rolled over."""
        with self._sub_lock:
            if today == self.day:
                return
            if self._unsub_doses:
                self._unsub_doses()
                self._unsub_doses = None
            with self._lock:
                self._doses = []
            self._doses_ready.clear()
            logger.info("Dose subscription for user %s moved %s -> %s", self.user_id, self.day, today)
            self._subscribe_doses(today)

    def stop(self):
        with self._sub_lock:
            for unsubscribe in (self._unsub_medications, self._unsub_doses):
                if unsubscribe:
                    unsubscribe()
            self._unsub_medications = None
            self._unsub_doses = None
        with self._lock:
            self._listeners = []
        logger.info("Dashboard session stopped for user %s", self.user_id)

    def _on_medications(self, rows):
        medications = [Medication.from_document(doc_id, data) for doc_id, data in rows]
        with self._lock:
            self._medications = medications
        self._medications_ready.set()
        self._notify()

    def _on_doses(self, day, rows):
        doses = [MedicationDose.from_document(doc_id, data) for doc_id, data in rows]
        with self._lock:
            # late delivery from a subscription replaced by ensure_day
            if day != self.day:
                return
            self._doses = doses
        self._doses_ready.set()
        self._notify()

    def wait_ready(self, timeout=None):
        """Block until both subscriptions have delivered their first result set."""
        return self._medications_ready.wait(timeout) and self._doses_ready.wait(timeout)

    def snapshot(self):
        with self._lock:
            return list(self._medications), list(self._doses)

    def add_listener(self, listener):
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener):
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self):
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(self)


class SessionRegistry:
    """One ``DashboardSession`` per signed-in user."""

    def __init__(self, store):
        self.store = store
        self._sessions = {}
        self._lock = threading.Lock()

    def get(self, user_id):
        with self._lock:
            return self._sessions.get(user_id)

    def open(self, user_id, today):
        with self._lock:
            session = self._sessions.get(user_id)
            if session is None:
                session = DashboardSession(self.store, user_id)
                self._sessions[user_id] = session
        session.start(today)
        with self._lock:
            closed = self._sessions.get(user_id) is not session
        if closed:
            # close() ran while this start was subscribing
            session.stop()
        return session

    def get_or_open(self, user_id, today):
        session = self.get(user_id)
        if session is None or not session.active:
            return self.open(user_id, today)
        session.ensure_day(today)
        return session

    def close(self, user_id):
        with self._lock:
            session = self._sessions.pop(user_id, None)
        if session:
            session.stop()
        return session is not None

    def close_all(self):
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.stop()
