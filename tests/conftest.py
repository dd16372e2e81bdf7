"""Shared test fixtures for the ploonbench test suite.

Provides small, hand-written versions of the benchmark datasets:

    concrete_scenario: products -> colors -> sizes plus a sibling specs
        object. Three nesting levels under the root; the golden encodings
        are the scenario_ploon and scenario_ploon_minified fixtures.

    product_catalog: list of products with inline tag arrays, nested
        color/size arrays and a dimensions object.

    error_logs: list of log entries with nullable user ids, multi-line
        stack traces containing structural characters, and a context object.

    sales_deals: deals with a contacts array that is empty for some deals.

    support_tickets: tickets whose optional keys are missing from some
        elements, exercising the absent marker.
"""

import copy

import pytest

SCENARIO_VALUE = {
    "products": [
        {
            "id": "P001",
            "name": "Shirt",
            "colors": [
                {"name": "Red", "sizes": [{"size": "M", "stock": 50}, {"size": "L", "stock": 30}]},
                {"name": "Blue", "sizes": [{"size": "S", "stock": 20}]},
            ],
        }
    ],
    "specs": {"weight": 2.5, "width": 15.0},
}

SCENARIO_RECORDS = [
    "[root](products#,specs{})",
    "1 ",
    "[root.products#1](id,name,colors#)",
    "2:1|P001|Shirt",
    "[root.products.colors#2](name,sizes#)",
    "3:1|Red",
    "[root.products.colors.sizes#2](size,stock)",
    "4:1|M|50",
    "4:2|L|30",
    "3:2|Blue",
    "[root.products.colors.sizes#1](size,stock)",
    "4:1|S|20",
    "[root.specs](weight,width)",
    "2 |2.5|15.0",
]

SCENARIO_PLOON = "\n".join(SCENARIO_RECORDS)

SCENARIO_PLOON_MINIFIED = (
    "[root](products#,specs{});1;"
    "[root.products#1](id,name,colors#);2:1|P001|Shirt;"
    "[root.products.colors#2](name,sizes#);3:1|Red;"
    "[root.products.colors.sizes#2](size,stock);4:1|M|50;4:2|L|30;"
    "3:2|Blue;"
    "[root.products.colors.sizes#1](size,stock);4:1|S|20;"
    "[root.specs](weight,width);2|2.5|15.0"
)


def _products():
    return [
        {
            "id": "P001",
            "name": "Oxford Shirt",
            "category": "Clothing",
            "price": 39.99,
            "inStock": True,
            "tags": ["bestseller", "eco-friendly"],
            "colors": [
                {
                    "name": "Navy",
                    "hex": "#000080",
                    "sizes": [{"size": "S", "stock": 12}, {"size": "M", "stock": 0}],
                },
                {
                    "name": "White",
                    "hex": "#FFFFFF",
                    "sizes": [{"size": "L", "stock": 7}],
                },
            ],
            "dimensions": {"weight": 0.3, "unit": "kg"},
        },
        {
            "id": "P002",
            "name": "Desk Lamp | LED",
            "category": "Home & Garden",
            "price": 24,
            "inStock": False,
            "tags": ["new-arrival"],
            "colors": [
                {
                    "name": "Black",
                    "hex": "#000000",
                    "sizes": [{"size": "One Size", "stock": 3}],
                },
            ],
            "dimensions": {"weight": 1.25, "unit": "kg"},
        },
    ]


def _error_logs():
    return [
        {
            "id": "E000001",
            "timestamp": "2025-01-15T10:30:00.000Z",
            "level": "error",
            "message": "Cannot read property 'map' of undefined",
            "userId": 4821,
            "stackTrace": "  at renderList (app.js:120)\n  at mount (core.js:45)",
            "context": {"browser": "Chrome", "os": "macOS", "version": "12.3"},
            "tags": ["frontend", "ui"],
            "resolved": False,
        },
        {
            "id": "E000002",
            "timestamp": "2025-01-15T11:02:13.500Z",
            "level": "warn",
            "message": "Slow query [orders] took 3.2s; retrying",
            "userId": None,
            "stackTrace": "  at query (db.js:88)",
            "context": {"browser": "Firefox", "os": "Linux", "version": "120.0"},
            "tags": [],
            "resolved": True,
        },
    ]


def _sales_deals():
    return [
        {
            "id": "D001",
            "company": "Acme, Inc.",
            "value": 125000,
            "stage": "negotiation",
            "contacts": [
                {"name": "Ana Ruiz", "email": "ana@acme.test", "primary": True},
                {"name": "Bo Chen", "email": "bo@acme.test", "primary": False},
            ],
        },
        {
            "id": "D002",
            "company": "Globex",
            "value": 8400.5,
            "stage": "closed-won",
            "contacts": [],
        },
        {
            "id": "D003",
            "company": "Initech",
            "value": 0,
            "stage": "prospecting",
            "contacts": [{"name": "Peter", "email": "peter@initech.test", "primary": True}],
        },
    ]


def _support_tickets():
    return [
        {
            "id": "T-1",
            "subject": "Login fails",
            "priority": "high",
            "assignee": "sam",
            "messages": [
                {"from": "customer", "body": "I cannot log in."},
                {"from": "agent", "body": "Please reset your password.", "internal": False},
            ],
        },
        {
            "id": "T-2",
            "subject": "Invoice copy",
            "priority": "low",
            "messages": [{"from": "customer", "body": "Need the March invoice."}],
            "satisfaction": 5,
        },
    ]


# ---- Pytest fixtures ----

@pytest.fixture
def concrete_scenario():
    """Products/colors/sizes with a sibling specs object."""
    return copy.deepcopy(SCENARIO_VALUE)


@pytest.fixture
def product_catalog():
    """Two products with inline tags, nested colors/sizes and dimensions."""
    return _products()


@pytest.fixture
def error_logs():
    """Two log entries with a null userId and a multi-line stack trace."""
    return _error_logs()


@pytest.fixture
def sales_deals():
    """Three deals, one with an empty contacts array."""
    return _sales_deals()


@pytest.fixture
def support_tickets():
    """Tickets with keys missing from some elements."""
    return _support_tickets()


@pytest.fixture
def all_datasets():
    """Every dataset keyed by its benchmark name."""
    return {
        "products": _products(),
        "error-logs": _error_logs(),
        "sales-deals": _sales_deals(),
        "support-tickets": _support_tickets(),
    }


@pytest.fixture
def scenario_ploon():
    """Golden standard-mode encoding of concrete_scenario."""
    return SCENARIO_PLOON


@pytest.fixture
def scenario_ploon_minified():
    """Golden minified encoding of concrete_scenario."""
    return SCENARIO_PLOON_MINIFIED
