"""Наполняет работающий сервис флагов тестовыми данными через HTTP API."""

from __future__ import annotations

import argparse
import logging
import sys

import httpx

logger = logging.getLogger("populate_db")

FEATURES = [
    {"key": "feature1", "name": "Feature 1", "description": "Test feature 1"},
    {"key": "feature2", "name": "Feature 2", "description": "Test feature 2"},
    {"key": "feature3", "name": "Feature 3", "description": "Test feature 3"},
]

FEATURE_STATES = [
    # feature1: организации и три workspace внутри org1
    {"featureKey": "feature1", "contextType": "organization", "contextId": "org1", "state": True},
    {"featureKey": "feature1", "contextType": "organization", "contextId": "org2", "state": True},
    {"featureKey": "feature1", "contextType": "workspace", "contextId": "workspace1", "state": True},
    {"featureKey": "feature1", "contextType": "workspace", "contextId": "workspace2", "state": True},
    {"featureKey": "feature1", "contextType": "workspace", "contextId": "workspace3", "state": True},
    # feature2: org1 и часть её workspace
    {"featureKey": "feature2", "contextType": "organization", "contextId": "org1", "state": True},
    {"featureKey": "feature2", "contextType": "workspace", "contextId": "workspace1", "state": True},
    {"featureKey": "feature2", "contextType": "workspace", "contextId": "workspace2", "state": True},
    # feature3
    {"featureKey": "feature3", "contextType": "organization", "contextId": "org1", "state": True},
    {"featureKey": "feature3", "contextType": "organization", "contextId": "org2", "state": True},
    {"featureKey": "feature3", "contextType": "workspace", "contextId": "workspace1", "state": True},
    {"featureKey": "feature3", "contextType": "workspace", "contextId": "workspace2", "state": True},
]


def _error_of(response: httpx.Response) -> str:
    try:
        return str(response.json().get("error") or response.text)
    except ValueError:
        return response.text


def populate(client: httpx.Client) -> tuple[int, int]:
    """Создаёт флаги и состояния; ошибки логируются и пропускаются."""
    created_features = 0
    for feature in FEATURES:
        response = client.post("/features", json=feature)
        if response.status_code != 201:
            logger.warning("Failed to create feature %s: %s", feature["key"], _error_of(response))
            continue
        created_features += 1
        logger.info("Created feature: %s", feature["key"])

    created_states = 0
    for state in FEATURE_STATES:
        response = client.post("/feature-states", json=state)
        if response.status_code != 201:
            logger.warning(
                "Failed to create feature state for %s in %s %s: %s",
                state["featureKey"],
                state["contextType"],
                state["contextId"],
                _error_of(response),
            )
            continue
        created_states += 1
        logger.info(
            "Created feature state: %s for %s %s = %s",
            state["featureKey"],
            state["contextType"],
            state["contextId"],
            state["state"],
        )

    return created_features, created_states


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--base-url", default="http://localhost:3000")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    try:
        with httpx.Client(base_url=args.base_url, timeout=10.0) as client:
            populate(client)
    except httpx.HTTPError as exc:
        logger.error("Failed to populate database: %s", exc)
        return 1
    logger.info("Database populated successfully")
    return 0


if __name__ == "__main__":
    sys.exit(main())
