import pytest

from casemix.catalog import ReferenceCatalog, load_seed_templates
from casemix.models import Severity
from casemix.resolver import (
    CodeResolver,
    GeneratedResolution,
    LocalResolution,
    LookupUnavailable,
    ResolutionError,
    ResolutionSource,
    validate_generated,
)

GENERATED = {
    "code": "Z99.9",
    "description": "Dependence on unspecified enabling machine",
    "severity": "II",
    "requiredDocuments": ["SEP", "RESUME MEDIS"],
}


@pytest.fixture
def catalog():
    return ReferenceCatalog(load_seed_templates())


def test_catalog_hit_never_calls_lookup(catalog, fake_lookup_cls):
    lookup = fake_lookup_cls(payload=GENERATED)
    resolver = CodeResolver(catalog, lookup)

    for template in catalog:
        resolution = resolver.resolve(template.code.lower())
        assert isinstance(resolution, LocalResolution)
        assert resolution.source is ResolutionSource.LOCAL
        assert resolution.description == template.description
        assert resolution.required_documents == template.required_documents

    assert lookup.calls == []


def test_catalog_miss_calls_lookup_once(catalog, fake_lookup_cls):
    lookup = fake_lookup_cls(payload=GENERATED)

    resolution = CodeResolver(catalog, lookup).resolve(" z99.9 ", hint="pasien ventilator")

    assert lookup.calls == [("Z99.9", "pasien ventilator")]
    assert isinstance(resolution, GeneratedResolution)
    assert resolution.source is ResolutionSource.GENERATED
    assert resolution.severity is Severity.II
    assert resolution.required_documents == ("SEP", "RESUME MEDIS")


def test_empty_code_is_rejected(catalog):
    with pytest.raises(ResolutionError):
        CodeResolver(catalog).resolve("   ")


def test_missing_lookup_raises_unavailable(catalog):
    with pytest.raises(LookupUnavailable):
        CodeResolver(catalog, None).resolve("Z99.9")


def test_lookup_failure_is_wrapped(catalog, fake_lookup_cls):
    lookup = fake_lookup_cls(error=TimeoutError("timeout"))

    with pytest.raises(ResolutionError) as excinfo:
        CodeResolver(catalog, lookup).resolve("Z99.9")

    assert isinstance(excinfo.value.__cause__, TimeoutError)
    assert len(lookup.calls) == 1


@pytest.mark.parametrize(
    "override",
    [
        {"severity": "IV"},
        {"description": ""},
        {"requiredDocuments": []},
        {"requiredDocuments": ["SEP", " "]},
        {"code": None},
    ],
)
def test_invalid_generated_payload_is_rejected(override):
    with pytest.raises(ResolutionError):
        validate_generated({**GENERATED, **override})


def test_validate_generated_rejects_non_mapping():
    with pytest.raises(ResolutionError):
        validate_generated(["Z99.9"])


def test_resolution_to_dict_carries_source():
    payload = validate_generated(GENERATED).to_dict()

    assert payload["source"] == "generated"
    assert payload["severity"] == "II"
