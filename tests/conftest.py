"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tests.fixtures.test_inputs import (
    get_office_inputs,
    get_retail_inputs,
    get_apartment_inputs,
    get_for_sale_inputs,
    get_mixed_use_inputs,
    get_mixed_use_inputs_with_incentives,
)


@pytest.fixture
def office_config():
    """Office reference configuration."""
    return get_office_inputs()


@pytest.fixture
def retail_config():
    return get_retail_inputs()


@pytest.fixture
def apartment_config():
    return get_apartment_inputs()


@pytest.fixture
def for_sale_config():
    return get_for_sale_inputs()


@pytest.fixture
def mixed_use_config():
    return get_mixed_use_inputs()


@pytest.fixture
def mixed_use_incentives_config():
    """Mixed-use with ground lease, state funding and parcels."""
    return get_mixed_use_inputs_with_incentives()
