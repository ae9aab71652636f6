"""Shared fixtures: question factories, an exams directory and a configured test client."""
import json
from datetime import datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from examprep.core.config import Settings
from examprep.main import create_app
from examprep.routers.deps import get_now
from examprep.schemas.question import Question

FIXED_NOW = datetime(2026, 3, 10, 14, 30)
ADMIN_EMAIL = "admin@example.com"


def make_question(text="What is 2 + 2?", options=("3", "4", "5", "22"), correct_index=1, **extra) -> Question:
    return Question(text=text, options=list(options), correct_index=correct_index, **extra)


def source_record(number, text, options, correct_index, explanation=""):
    """A question as stored in the exam JSON files."""
    return {
        "soru numarası": number,
        "soru cümlesi": text,
        "seçenekler": options,
        "doğru cevap indeksi": correct_index,
        "açıklama": explanation,
    }


def write_exam(root: Path, relative: str, records) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def today():
    return FIXED_NOW.date()


@pytest.fixture
def exams_dir(tmp_path):
    root = tmp_path / "exams"
    write_exam(
        root,
        "Programlama Temelleri sınavlar/2023-2024 Güz Dönemi Vize Sınavı.json",
        [
            source_record(1, "Which keyword defines a function in Python?", ["A) func", "B) def", "C) fn"], 1),
            source_record(2, "What does len('abc') return?", ["A) 2", "B) 3", "C) 4", "D) error"], 1, "Three characters."),
            source_record(3, "Which type is immutable?", ["A) list", "B) dict", "C) tuple"], 2),
        ],
    )
    write_exam(
        root,
        "Veri Yapıları/2021-2022 Bahar Dönemi Final Sınavı.json",
        [
            source_record(1, "A stack is...", ["A) FIFO", "B) LIFO"], 1),
            source_record(2, "A queue is...", ["A) FIFO", "B) LIFO"], 0),
        ],
    )
    write_exam(root, "hatalı/2020-2021 Vize.json", [source_record(1, "broken", ["A) x", "B) y"], 0)])
    return root


@pytest.fixture
def settings(tmp_path, exams_dir):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        profile_backend="json",
        data_dir=tmp_path / "data",
        exams_dir=exams_dir,
        admin_emails=[ADMIN_EMAIL],
        secret_key="test-secret",
    )


@pytest.fixture
def app(settings):
    app = create_app(settings)
    app.dependency_overrides[get_now] = lambda: FIXED_NOW
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


def register(client, email, password="correct-horse", display_name=None) -> dict:
    """Register an account and return auth headers for it."""
    response = client.post(
        "/auth/register",
        json={"email": email, "password": password, "display_name": display_name},
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
