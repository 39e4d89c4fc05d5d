"""
Service layer: run orchestration, AI, alerts, calendar, trends, digests.

Modules are imported directly (``from govwatch.services.connector_service
import ConnectorService``); the connector service depends on the ingest
pipeline, which in turn uses the AI service.
"""
