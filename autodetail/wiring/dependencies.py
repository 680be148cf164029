from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from zoneinfo import ZoneInfo

from fastapi import Depends, Header

from autodetail.application.ports.document_store import DocumentStorePort
from autodetail.application.ports.embedder import EmbedderPort
from autodetail.application.ports.notifier import NotifierPort
from autodetail.application.use_cases.analytics import PricingAnalyticsUseCase
from autodetail.application.use_cases.assessments import AssessmentsUseCase
from autodetail.application.use_cases.booking_workflow import BookingLifecycleWorkflow
from autodetail.application.use_cases.bookings import BookingsUseCase
from autodetail.application.use_cases.clients import ClientsUseCase
from autodetail.application.use_cases.knowledge import PricingKnowledgeUseCase
from autodetail.application.use_cases.maintenance import MaintenanceJobs
from autodetail.application.use_cases.pricing import PricingCalculator
from autodetail.application.use_cases.services import ServiceCatalogUseCase
from autodetail.application.use_cases.tenants import TenantsUseCase
from autodetail.application.use_cases.users import UserDirectory
from autodetail.application.use_cases.vehicles import VehiclesUseCase
from autodetail.application.use_cases.workflow_timers import ProcessDueTimersUseCase
from autodetail.core.config import settings
from autodetail.domain.entities.timestamps import utcnow
from autodetail.domain.entities.user import Identity, User
from autodetail.infrastructure.embeddings.hashing_embedder import HashingEmbedder
from autodetail.infrastructure.embeddings.openai_embedder import OpenAIEmbedder
from autodetail.infrastructure.knowledge.pricing_seed import PRICING_KNOWLEDGE_SEED
from autodetail.infrastructure.knowledge.service_seed import SERVICE_SEED
from autodetail.infrastructure.knowledge.vector_store import VectorKnowledgeStore
from autodetail.infrastructure.notifications.http_notifier import HttpNotifier
from autodetail.infrastructure.notifications.logging_notifier import LoggingNotifier
from autodetail.infrastructure.scheduling.store_timer_scheduler import StoreTimerScheduler
from autodetail.infrastructure.store.json_store import JsonDocumentStore
from autodetail.infrastructure.store.memory_store import MemoryDocumentStore


@dataclass
class Container:
    store: DocumentStorePort
    users: UserDirectory
    catalog: ServiceCatalogUseCase
    knowledge: PricingKnowledgeUseCase
    pricing: PricingCalculator
    workflow: BookingLifecycleWorkflow
    due_timers: ProcessDueTimersUseCase
    bookings: BookingsUseCase
    vehicles: VehiclesUseCase
    tenants: TenantsUseCase
    clients: ClientsUseCase
    assessments: AssessmentsUseCase
    analytics: PricingAnalyticsUseCase
    jobs: MaintenanceJobs


_store: DocumentStorePort | None = None
_container: Container | None = None


def get_store() -> DocumentStorePort:
    global _store
    if _store is None:
        # Workflow timers and checkpoints must survive a restart.
        if (settings.STORE_PROVIDER or "").lower() == "memory":
            _store = MemoryDocumentStore()
        else:
            _store = JsonDocumentStore(settings.STORE_DATA_DIR)
    return _store


@lru_cache
def get_embedder() -> EmbedderPort:
    if settings.OPENAI_API_KEY and settings.OPENAI_API_KEY.strip():
        return OpenAIEmbedder()
    return HashingEmbedder()


def get_notifier() -> NotifierPort:
    if settings.NOTIFICATION_WEBHOOK_URL:
        return HttpNotifier(settings.NOTIFICATION_WEBHOOK_URL)
    return LoggingNotifier()


def build_container(
    store: DocumentStorePort,
    notifier: NotifierPort,
    embedder: EmbedderPort,
    clock: Callable[[], datetime] = utcnow,
) -> Container:
    tz = ZoneInfo(settings.BUSINESS_TIMEZONE)
    catalog = ServiceCatalogUseCase(store)
    knowledge = PricingKnowledgeUseCase(
        embedder=embedder,
        knowledge=VectorKnowledgeStore(store),
        search_limit=settings.KNOWLEDGE_SEARCH_LIMIT,
        insight_limit=settings.PRICING_INSIGHT_LIMIT,
    )
    pricing = PricingCalculator(catalog=catalog, store=store, timezone=tz, knowledge=knowledge)
    scheduler = StoreTimerScheduler(store)
    workflow = BookingLifecycleWorkflow(
        store=store,
        notifier=notifier,
        scheduler=scheduler,
        clock=clock,
        reminder_lead=timedelta(hours=settings.REMINDER_LEAD_HOURS),
        service_buffer=timedelta(minutes=settings.SERVICE_BUFFER_MINUTES),
        default_service_minutes=settings.DEFAULT_SERVICE_MINUTES,
    )
    due_timers = ProcessDueTimersUseCase(scheduler=scheduler, workflow=workflow, clock=clock)
    bookings = BookingsUseCase(
        store=store,
        catalog=catalog,
        pricing=pricing,
        workflow=workflow,
        timezone=tz,
        clock=clock,
    )
    return Container(
        store=store,
        users=UserDirectory(store),
        catalog=catalog,
        knowledge=knowledge,
        pricing=pricing,
        workflow=workflow,
        due_timers=due_timers,
        bookings=bookings,
        vehicles=VehiclesUseCase(store, clock=clock),
        tenants=TenantsUseCase(store, clock=clock),
        clients=ClientsUseCase(store, clock=clock),
        assessments=AssessmentsUseCase(store=store, catalog=catalog, bookings=bookings, clock=clock),
        analytics=PricingAnalyticsUseCase(store),
        jobs=MaintenanceJobs(
            store=store,
            due_timers=due_timers,
            knowledge=knowledge,
            clock=clock,
            retention_days=settings.PRICING_HISTORY_RETENTION_DAYS,
            refresh_window_days=settings.KNOWLEDGE_REFRESH_WINDOW_DAYS,
        ),
    )


def seed_if_empty(container: Container) -> None:
    logger = logging.getLogger(__name__)
    container.catalog.seed(SERVICE_SEED)
    if not container.knowledge.has_items():
        try:
            container.knowledge.seed(PRICING_KNOWLEDGE_SEED)
        except Exception as e:
            logger.warning("Pricing knowledge not seeded", extra={"error": str(e)})


def get_container() -> Container:
    global _container
    if _container is None:
        _container = build_container(store=get_store(), notifier=get_notifier(), embedder=get_embedder())
        if settings.SEED_ON_STARTUP:
            seed_if_empty(_container)
    return _container


def get_identity(
    x_auth_subject: str | None = Header(default=None),
    x_auth_email: str | None = Header(default=None),
    x_auth_name: str | None = Header(default=None),
    x_auth_phone: str | None = Header(default=None),
) -> Identity | None:
    """Identity asserted by the authenticating gateway in front of the service."""
    if not x_auth_subject:
        return None
    return Identity(
        subject=x_auth_subject,
        email=x_auth_email or "",
        name=x_auth_name or "",
        phone=x_auth_phone,
    )


def get_actor(
    identity: Identity | None = Depends(get_identity),
    container: Container = Depends(get_container),
) -> User | None:
    return container.users.resolve(identity)
