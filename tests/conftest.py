"""
Shared fixtures for all tests.

factory-boy factories live here so both unit/ and integration/ can import them.
Records are frozen dataclasses, so plain factory.Factory is enough (no ORM).
"""
import pytest
from django.apps import apps
from django.test import Client

import factory
from rxsearch.catalog.registry import CatalogRegistry
from rxsearch.catalog.store import CatalogStore
from rxsearch.catalog.types import MedicationRecord, TestRecord, TestType
from rxsearch.search.pipeline import SearchPipeline


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

class MedicationFactory(factory.Factory):
    class Meta:
        model = MedicationRecord

    id = factory.Sequence(lambda n: f'm{n + 100}')
    name = factory.Sequence(lambda n: f'Medication {n}')
    categories = ('General',)
    popularity_score = 50
    generic_name = ''
    aliases = ()
    dosage_forms = ('Tablet',)
    strengths = ('10 mg',)
    contraindications = ()
    route = 'oral'
    indications = ()


class LabTestFactory(factory.Factory):
    class Meta:
        model = TestRecord

    id = factory.Sequence(lambda n: f't{n + 100}')
    name = factory.Sequence(lambda n: f'Lab Test {n}')
    categories = ('Blood Test',)
    type = TestType.LABORATORY
    popularity_score = 50
    preparation = ('None required',)
    fasting_required = False


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def amoxicillin():
    return MedicationFactory(
        id='m1',
        name='Amoxicillin',
        aliases=('Amoxil',),
        categories=('Antibiotic',),
        popularity_score=90,
        contraindications=('Penicillin allergy', 'Mononucleosis', 'Severe renal impairment', 'Colitis'),
        strengths=('500 mg', '250 mg'),
    )


@pytest.fixture
def co_amoxiclav():
    return MedicationFactory(
        id='m2',
        name='Amoxicillin-Clavulanate',
        aliases=(),
        categories=('Antibiotic',),
        popularity_score=70,
    )


@pytest.fixture
def medication_store(amoxicillin, co_amoxiclav):
    """Two-record catalog from the example scenarios plus some unrelated records."""
    return CatalogStore([
        amoxicillin,
        co_amoxiclav,
        MedicationFactory(id='m3', name='Ibuprofen', generic_name='Ibuprofen',
                          aliases=('Advil',), categories=('NSAID', 'Analgesic'), popularity_score=95,
                          indications=('pain', 'fever')),
        MedicationFactory(id='m4', name='Aspirin', generic_name='Acetylsalicylic acid',
                          categories=('NSAID', 'Antiplatelet'), popularity_score=88,
                          indications=('pain', 'angina')),
        MedicationFactory(id='m5', name='Azithromycin', aliases=('Zithromax',),
                          categories=('Antibiotic', 'Macrolide'), popularity_score=85,
                          indications=('pneumonia',)),
    ], name='medications')


@pytest.fixture
def test_store():
    return CatalogStore([
        LabTestFactory(id='t001', name='Complete Blood Count (CBC)',
                       categories=('Blood Test', 'Hematology'), popularity_score=95),
        LabTestFactory(id='t002', name='Lipid Profile', categories=('Blood Test', 'Cardiology'),
                       preparation=('Fasting for 9-12 hours',), fasting_required=True, popularity_score=85),
        LabTestFactory(id='t003', name='Chest X-ray', categories=('Radiology',), type=TestType.IMAGING,
                       preparation=('Remove jewelry and metal objects',), popularity_score=92),
    ], name='tests')


@pytest.fixture
def registry(medication_store, test_store):
    return CatalogRegistry.from_stores(medication_store, test_store)


@pytest.fixture
def pipeline(registry):
    return SearchPipeline(registry)


@pytest.fixture
def default_registry():
    """The registry loaded from the bundled datasets at Django start-up."""
    return apps.get_app_config('rxsearch').registry


@pytest.fixture
def small_registry(monkeypatch, registry):
    """Swap the process-wide registry for the small fixture catalog."""
    monkeypatch.setattr(apps.get_app_config('rxsearch'), 'registry', registry)
    return registry


@pytest.fixture
def api_client():
    """Django test client for integration tests."""
    return Client()
