from collections.abc import Mapping


def _json(schema_ref: str, description: str) -> dict:
    return {
        "description": description,
        "content": {"application/json": {"schema": {"$ref": f"#/components/schemas/{schema_ref}"}}},
    }


def _error(description: str) -> dict:
    return _json("ErrorResponse", description)


def _path_param(name: str, description: str) -> dict:
    return {"name": name, "in": "path", "required": True, "schema": {"type": "string"}, "description": description}


def _query_param(name: str, description: str, enum: list[str] | None = None) -> dict:
    schema = {"type": "string"}
    if enum:
        schema["enum"] = enum
    return {"name": name, "in": "query", "required": False, "schema": schema, "description": description}


def build_spec(config: Mapping[str, str], server_url: str) -> dict:
    """Return the OpenAPI document covering the mClaim endpoints."""
    title = config.get("API_TITLE", "mClaim INA-CBG API")
    version = config.get("API_VERSION", "1.0.0")
    patient_id = _path_param("patient_id", "Patient identifier")

    return {
        "openapi": "3.0.3",
        "info": {
            "title": title,
            "version": version,
            "description": (
                "Casemix helper for BPJS claims. Diagnosis codes are resolved against the local INA-CBG "
                "catalog first and fall back to an AI lookup; every recorded diagnosis carries its "
                "document checklist. Reports compare hospital billing against the INA-CBG tariff."
            ),
        },
        "servers": [{"url": server_url}],
        "paths": {
            "/health/ping": {
                "get": {
                    "summary": "Service health probe",
                    "tags": ["Health"],
                    "responses": {"200": _json("HealthStatus", "Service is available")},
                }
            },
            "/health/ready": {
                "get": {
                    "summary": "Catalog size and AI lookup availability",
                    "tags": ["Health"],
                    "responses": {"200": _json("ReadinessStatus", "Readiness details")},
                }
            },
            "/patients": {
                "get": {
                    "summary": "List patients",
                    "tags": ["Patients"],
                    "parameters": [
                        _query_param("status", "Status tab filter", ["active", "krs", "Rawat Inap", "Rawat Jalan", "Pulang"]),
                        _query_param("q", "Search by name, MRN or diagnosis code"),
                    ],
                    "responses": {"200": _json("PatientListResponse", "Patients matching the filters")},
                }
            },
            "/patients/{patient_id}": {
                "get": {
                    "summary": "Patient detail with diagnosis history",
                    "tags": ["Patients"],
                    "parameters": [patient_id],
                    "responses": {
                        "200": _json("PatientResponse", "Patient detail"),
                        "404": _error("Patient not found"),
                    },
                }
            },
            "/patients/{patient_id}/diagnoses": {
                "post": {
                    "summary": "Resolve a diagnosis code and record it for the patient",
                    "tags": ["Patients"],
                    "parameters": [patient_id],
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/DiagnosisRequest"}}
                        },
                    },
                    "responses": {
                        "201": _json("DiagnosisCreatedResponse", "Diagnosis recorded"),
                        "400": _error("Empty code"),
                        "404": _error("Patient not found"),
                        "409": _error("Another resolution is still running for this patient"),
                        "502": _error("AI lookup failed or returned an invalid payload"),
                        "503": _error("Code not in catalog and AI lookup not configured"),
                    },
                }
            },
            "/patients/{patient_id}/diagnoses/{diagnosis_id}/checklist/{item_id}/toggle": {
                "post": {
                    "summary": "Toggle one checklist item",
                    "tags": ["Patients"],
                    "parameters": [
                        patient_id,
                        _path_param("diagnosis_id", "Diagnosis identifier"),
                        _path_param("item_id", "Checklist item identifier"),
                    ],
                    "responses": {
                        "200": _json("DiagnosisResponse", "Updated diagnosis"),
                        "404": _error("Patient, diagnosis or item not found"),
                    },
                }
            },
            "/patients/{patient_id}/costs": {
                "put": {
                    "summary": "Update billing amount and manual INA-CBG tariff",
                    "tags": ["Patients"],
                    "parameters": [patient_id],
                    "requestBody": {
                        "required": True,
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/CostUpdate"}}},
                    },
                    "responses": {
                        "200": _json("PatientResponse", "Updated patient"),
                        "400": _error("Invalid amount"),
                        "404": _error("Patient not found"),
                    },
                }
            },
            "/catalog": {
                "get": {
                    "summary": "List INA-CBG reference templates",
                    "tags": ["Catalog"],
                    "parameters": [_query_param("q", "Search by code or description")],
                    "responses": {"200": _json("TemplateListResponse", "Reference templates")},
                }
            },
            "/catalog/{code}": {
                "get": {
                    "summary": "Reference template for one code",
                    "tags": ["Catalog"],
                    "parameters": [_path_param("code", "INA-CBG diagnosis code")],
                    "responses": {
                        "200": _json("TemplateResponse", "Reference template"),
                        "404": _error("Code not in catalog"),
                    },
                }
            },
            "/catalog/import": {
                "post": {
                    "summary": "Import reference templates from delimited text",
                    "tags": ["Catalog"],
                    "parameters": [_query_param("mode", "Import mode for raw bodies", ["merge", "replace"])],
                    "requestBody": {
                        "required": True,
                        "content": {
                            "application/json": {"schema": {"$ref": "#/components/schemas/CatalogImportRequest"}},
                            "text/plain": {
                                "schema": {"type": "string"},
                                "example": "No;Kode;Deskripsi;Tarif;Berkas\n1;A09.9;Gastroenteritis;1.264.200;SEP,TRIAGE",
                            },
                        },
                    },
                    "responses": {
                        "201": _json("CatalogImportResponse", "Import applied"),
                        "400": _error("Empty body, bad mode or no valid rows for replace"),
                    },
                }
            },
            "/reports/cost-summary": {
                "get": {
                    "summary": "Total billing vs total INA-CBG tariff",
                    "tags": ["Reports"],
                    "responses": {"200": _json("CostSummaryResponse", "Cost totals")},
                }
            },
            "/reports/cost-control": {
                "get": {
                    "summary": "Per-patient cost control rows",
                    "tags": ["Reports"],
                    "parameters": [_query_param("q", "Search by name, MRN or diagnosis code")],
                    "responses": {"200": _json("CostControlResponse", "Cost rows")},
                }
            },
            "/reports/cost-control.csv": {
                "get": {
                    "summary": "Download cost control rows as CSV",
                    "tags": ["Reports"],
                    "responses": {
                        "200": {
                            "description": "Semicolon separated CSV (UTF-8 with BOM)",
                            "content": {"text/csv": {"schema": {"type": "string"}}},
                        }
                    },
                }
            },
            "/reports/dashboard": {
                "get": {
                    "summary": "Dashboard counters",
                    "tags": ["Reports"],
                    "responses": {"200": _json("DashboardResponse", "Dashboard summary")},
                }
            },
        },
        "components": {
            "schemas": {
                "HealthStatus": {
                    "type": "object",
                    "properties": {"status": {"type": "string", "example": "ok"}},
                    "required": ["status"],
                },
                "ReadinessStatus": {
                    "type": "object",
                    "properties": {
                        "status": {"type": "string", "example": "ok"},
                        "catalog_size": {"type": "integer", "example": 105},
                        "duplicate_codes": {"type": "array", "items": {"type": "string"}},
                        "generative_lookup": {"type": "boolean"},
                    },
                },
                "ErrorResponse": {
                    "type": "object",
                    "properties": {"error": {"type": "string"}},
                    "required": ["error"],
                },
                "ChecklistItem": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "name": {"type": "string", "example": "SEP"},
                        "is_checked": {"type": "boolean"},
                        "required": {"type": "boolean"},
                    },
                    "required": ["id", "name", "is_checked", "required"],
                },
                "ChecklistProgress": {
                    "type": "object",
                    "properties": {
                        "checked": {"type": "integer", "example": 2},
                        "total": {"type": "integer", "example": 3},
                        "ratio": {"type": "number", "format": "float", "example": 0.6667},
                        "percent": {"type": "integer", "example": 67},
                        "has_requirements": {"type": "boolean"},
                    },
                },
                "Diagnosis": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "code": {"type": "string", "example": "J45.9"},
                        "description": {"type": "string", "example": "ASMA"},
                        "severity": {"type": "string", "enum": ["I", "II", "III"]},
                        "timestamp": {"type": "string", "format": "date-time"},
                        "checklist": {"type": "array", "items": {"$ref": "#/components/schemas/ChecklistItem"}},
                        "notes": {"type": "string", "nullable": True},
                        "progress": {"$ref": "#/components/schemas/ChecklistProgress"},
                    },
                    "required": ["id", "code", "description", "severity", "timestamp", "checklist"],
                },
                "EffectiveTariff": {
                    "type": "object",
                    "properties": {
                        "amount": {"type": "integer", "example": 2114700},
                        "is_from_catalog": {"type": "boolean"},
                    },
                },
                "Patient": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "mrn": {"type": "string", "example": "RM-2024-001"},
                        "bpjs_number": {"type": "string"},
                        "name": {"type": "string"},
                        "gender": {"type": "string", "enum": ["Laki-laki", "Perempuan"], "nullable": True},
                        "dob": {"type": "string", "nullable": True},
                        "status": {"type": "string", "enum": ["Rawat Inap", "Rawat Jalan", "Pulang"]},
                        "diagnoses": {"type": "array", "items": {"$ref": "#/components/schemas/Diagnosis"}},
                        "billing_amount": {"type": "integer", "nullable": True},
                        "ina_cbg_amount": {"type": "integer", "nullable": True},
                        "admission_date": {"type": "string", "nullable": True},
                        "room_number": {"type": "string", "nullable": True},
                        "last_visit": {"type": "string", "nullable": True},
                        "effective_tariff": {"$ref": "#/components/schemas/EffectiveTariff"},
                        "active_checklist": {"$ref": "#/components/schemas/ChecklistProgress"},
                    },
                    "required": ["id", "mrn", "name", "status", "diagnoses"],
                },
                "PatientResponse": {
                    "type": "object",
                    "properties": {"data": {"$ref": "#/components/schemas/Patient"}},
                },
                "PatientListResponse": {
                    "type": "object",
                    "properties": {
                        "data": {"type": "array", "items": {"$ref": "#/components/schemas/Patient"}},
                        "meta": {"type": "object", "properties": {"total": {"type": "integer"}}},
                    },
                },
                "DiagnosisRequest": {
                    "type": "object",
                    "properties": {
                        "code": {"type": "string", "example": "J45.9"},
                        "description": {"type": "string", "description": "Optional description / hint for the AI lookup"},
                    },
                    "required": ["code"],
                },
                "DiagnosisResponse": {
                    "type": "object",
                    "properties": {"data": {"$ref": "#/components/schemas/Diagnosis"}},
                },
                "DiagnosisCreatedResponse": {
                    "type": "object",
                    "properties": {
                        "data": {"$ref": "#/components/schemas/Diagnosis"},
                        "meta": {
                            "type": "object",
                            "properties": {
                                "source": {"type": "string", "enum": ["local", "generated"]},
                                "diagnosis_count": {"type": "integer"},
                            },
                        },
                    },
                },
                "CostUpdate": {
                    "type": "object",
                    "properties": {
                        "billing_amount": {"type": "integer", "minimum": 0, "nullable": True},
                        "ina_cbg_amount": {"type": "integer", "minimum": 0, "nullable": True},
                    },
                },
                "ReferenceTemplate": {
                    "type": "object",
                    "properties": {
                        "id": {"type": "string"},
                        "code": {"type": "string", "example": "J45.9"},
                        "description": {"type": "string"},
                        "severity": {"type": "string", "enum": ["I", "II", "III"]},
                        "tariff": {"type": "integer", "nullable": True},
                        "required_documents": {"type": "array", "items": {"type": "string"}},
                    },
                },
                "TemplateResponse": {
                    "type": "object",
                    "properties": {"data": {"$ref": "#/components/schemas/ReferenceTemplate"}},
                },
                "TemplateListResponse": {
                    "type": "object",
                    "properties": {
                        "data": {"type": "array", "items": {"$ref": "#/components/schemas/ReferenceTemplate"}},
                        "meta": {"type": "object", "properties": {"total": {"type": "integer"}}},
                    },
                },
                "CatalogImportRequest": {
                    "type": "object",
                    "properties": {
                        "text": {"type": "string"},
                        "mode": {"type": "string", "enum": ["merge", "replace"], "default": "merge"},
                    },
                    "required": ["text"],
                },
                "CatalogImportResponse": {
                    "type": "object",
                    "properties": {
                        "data": {
                            "type": "object",
                            "properties": {
                                "imported": {"type": "integer"},
                                "skipped": {"type": "integer"},
                                "mode": {"type": "string"},
                                "total": {"type": "integer"},
                            },
                        }
                    },
                },
                "CostSummary": {
                    "type": "object",
                    "properties": {
                        "total_billing": {"type": "integer", "example": 1500000},
                        "total_tariff": {"type": "integer", "example": 1200000},
                        "variance": {"type": "integer", "example": -300000},
                    },
                },
                "CostSummaryResponse": {
                    "type": "object",
                    "properties": {"data": {"$ref": "#/components/schemas/CostSummary"}},
                },
                "CostControlRow": {
                    "type": "object",
                    "properties": {
                        "patient_id": {"type": "string"},
                        "mrn": {"type": "string"},
                        "name": {"type": "string"},
                        "dx_code": {"type": "string"},
                        "length_of_stay": {"type": "string", "example": "3 Hari"},
                        "billing_amount": {"type": "integer"},
                        "tariff_amount": {"type": "integer"},
                        "tariff_from_catalog": {"type": "boolean"},
                        "variance": {"type": "integer"},
                    },
                },
                "CostControlResponse": {
                    "type": "object",
                    "properties": {
                        "data": {"type": "array", "items": {"$ref": "#/components/schemas/CostControlRow"}},
                        "meta": {"type": "object", "properties": {"total": {"type": "integer"}}},
                    },
                },
                "DashboardResponse": {
                    "type": "object",
                    "properties": {
                        "data": {
                            "type": "object",
                            "properties": {
                                "total_patients": {"type": "integer"},
                                "admitted_patients": {"type": "integer"},
                                "pending_checklists": {"type": "integer"},
                                "catalog_size": {"type": "integer"},
                                "costs": {"$ref": "#/components/schemas/CostSummary"},
                            },
                        }
                    },
                },
            }
        },
        "tags": [
            {"name": "Health"},
            {"name": "Patients"},
            {"name": "Catalog"},
            {"name": "Reports"},
        ],
    }
