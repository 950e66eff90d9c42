from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

import firebase_admin
from firebase_admin import credentials, firestore

logger = logging.getLogger(__name__)


@dataclass
class FirestoreConfig:
    credentials_path: str = ""
    project_id: Optional[str] = None
    app_name: str = "[DEFAULT]"


class FirestoreConnection:
    """Singleton-like Firestore client factory.

    Note: The Firebase app is initialized once per process, on first use.
    Without a credentials path the application default credentials are used
    (this also covers the Firestore emulator via FIRESTORE_EMULATOR_HOST).
    """

    _instance: Optional["FirestoreConnection"] = None

    def __init__(self, config: FirestoreConfig):
        self._config = config
        self._client = None
        self._lock = threading.Lock()

    @classmethod
    def get_instance(cls, config: FirestoreConfig) -> "FirestoreConnection":
        if cls._instance is None:
            cls._instance = FirestoreConnection(config)
        return cls._instance

    def _initialize_app(self) -> firebase_admin.App:
        try:
            app = firebase_admin.get_app(self._config.app_name)
            logger.info("Firebase app already initialized")
            return app
        except ValueError:
            pass

        if self._config.credentials_path:
            cred = credentials.Certificate(self._config.credentials_path)
        else:
            cred = credentials.ApplicationDefault()

        options = {"projectId": self._config.project_id} if self._config.project_id else None
        app = firebase_admin.initialize_app(cred, options, name=self._config.app_name)
        logger.info("Firebase app initialized (project=%s)", self._config.project_id or "default")
        return app

    def client(self):
        with self._lock:
            if self._client is None:
                self._client = firestore.client(self._initialize_app())
            return self._client
