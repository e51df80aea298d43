"""Tests for docdrift.generator."""

from __future__ import annotations

import json
import threading

import pytest

from docdrift.config import LLMConfig, ScanLimits
from docdrift.generator import (
    STRATEGY_EXISTING,
    STRATEGY_LLM,
    STRATEGY_TEMPLATE,
    DocumentGenerator,
    GenerationContext,
    clean_model_markdown,
    resolve_output_path,
)
from docdrift.llm.runner import LLMError, LLMRunner
from docdrift.models import DocTarget, RepoDigest, RepoSummary, ScanPhase, TopLevelEntry
from docdrift.progress import ScanCancelled
from docdrift.prompting.constants import README_STYLE_GUIDE

SUMMARY = RepoSummary("acme/storefront", "main", 4, (TopLevelEntry("src", 3),))
README = DocTarget("README", ("README.md",))
ARCHITECTURE = DocTarget("Architecture", ("docs/architecture/**/*.md",))


def _context(**overrides) -> GenerationContext:
    values = {
        "repo_summary": SUMMARY,
        "manifest": {"dependencies": {"next": "14", "prisma": "5"}, "scripts": {"dev": "next dev"}},
        "file_paths": ["package.json", "src/index.ts"],
    }
    values.update(overrides)
    return GenerationContext(**values)


def _llm(reply):
    requests = []

    def fake_runner(request):
        requests.append(request)
        if isinstance(reply, Exception):
            raise reply
        return reply

    return LLMRunner(LLMConfig(api_key="sk-test"), runner=fake_runner), requests


@pytest.mark.parametrize(
    ("target", "expected"),
    [
        (DocTarget("README", ("README.md",)), "README.md"),
        (DocTarget("API Reference", ("", "docs/api/**/*.md")), "docs/api/README.md"),
        (DocTarget("Architecture", ()), "docs/architecture/README.md"),
        (DocTarget("Tutorial", ("**/*.md",)), "docs/tutorials/README.md"),
        (DocTarget("Changelog", ("CHANGELOG.md",)), "CHANGELOG.md"),
    ],
)
def test_resolve_output_path(target: DocTarget, expected: str) -> None:
    assert resolve_output_path(target) == expected


def test_conservative_fallback_keeps_existing_non_readme(make_host, repo_ref) -> None:
    existing = "# Architecture\n\nHand-written notes.   \n"
    host = make_host({"docs/architecture/README.md": existing})

    document = DocumentGenerator(host).generate(repo_ref, ARCHITECTURE, _context())

    assert document.content == existing
    assert document.existing == existing
    assert document.strategy == STRATEGY_EXISTING
    assert host.lookups == ["docs/architecture/README.md"]


def test_missing_non_readme_gets_skeleton(make_host, repo_ref) -> None:
    document = DocumentGenerator(make_host({})).generate(repo_ref, ARCHITECTURE, _context())

    assert document.existing is None
    assert document.strategy == STRATEGY_TEMPLATE
    assert "## Architecture" in document.content


def test_readme_is_normalized_to_template(make_host, repo_ref) -> None:
    host = make_host({"README.md": "# Old"})

    document = DocumentGenerator(host).generate(repo_ref, README, _context())

    assert document.strategy == STRATEGY_TEMPLATE
    assert document.existing == "# Old"
    assert "### Database Setup (Prisma)" in document.content
    assert 'DATABASE_URL="replace-me"' in document.content


def test_llm_is_skipped_without_digest(make_host, repo_ref) -> None:
    runner, requests = _llm("# Rewritten")

    document = DocumentGenerator(make_host({}), runner).generate(repo_ref, README, _context())

    assert document.strategy == STRATEGY_TEMPLATE
    assert requests == []


def test_llm_rewrite_is_used_with_digest(make_host, repo_ref) -> None:
    runner, requests = _llm("```markdown\n# Storefront\n\nBetter docs.\n```")
    host = make_host({"README.md": "# Old"})

    document = DocumentGenerator(host, runner).generate(
        repo_ref, README, _context(digest=RepoDigest(repo_purpose="Sells widgets"), constraints=["Be brief"])
    )

    assert document.strategy == STRATEGY_LLM
    assert document.content == "# Storefront\n\nBetter docs.\n"
    payload = json.loads(requests[0].prompt)
    assert payload["existingMarkdown"] == "# Old"
    assert payload["constraints"] == ["Be brief"]
    assert payload["digest"]["repoPurpose"] == "Sells widgets"
    assert requests[0].model == "gpt-5.1"


def test_llm_prompt_copy_of_existing_is_capped(make_host, repo_ref) -> None:
    existing = "x" * 50
    runner, requests = _llm("# Arch")
    host = make_host({"docs/architecture/README.md": existing})
    generator = DocumentGenerator(host, runner, ScanLimits(max_existing_chars=10))

    document = generator.generate(repo_ref, ARCHITECTURE, _context(digest=RepoDigest()))

    assert json.loads(requests[0].prompt)["existingMarkdown"] == "x" * 10
    assert document.existing == existing


def test_llm_failure_falls_back_to_existing(make_host, repo_ref) -> None:
    runner, _ = _llm(LLMError("LLM request failed with status 500: boom", status=500))
    existing = "# Architecture\n"
    host = make_host({"docs/architecture/README.md": existing})

    document = DocumentGenerator(host, runner).generate(repo_ref, ARCHITECTURE, _context(digest=RepoDigest()))

    assert document.strategy == STRATEGY_EXISTING
    assert document.content == existing


def test_globbed_non_readme_rewrite_omits_readme_style_guide(make_host, repo_ref) -> None:
    runner, requests = _llm("# Architecture\n\nUpdated.\n")
    host = make_host({"docs/architecture/README.md": "# Architecture\n"})

    document = DocumentGenerator(host, runner).generate(repo_ref, ARCHITECTURE, _context(digest=RepoDigest()))

    assert document.output_path == "docs/architecture/README.md"
    assert document.strategy == STRATEGY_LLM
    assert README_STYLE_GUIDE not in requests[0].system
    assert json.loads(requests[0].prompt)["targetType"] == "Architecture"


def test_failed_lookup_is_treated_as_missing(make_host, repo_ref) -> None:
    host = make_host({}, lookup_error=TimeoutError("The read operation timed out"))

    document = DocumentGenerator(host).generate(repo_ref, ARCHITECTURE, _context())

    assert document.existing is None
    assert document.strategy == STRATEGY_TEMPLATE
    assert "## Architecture" in document.content


def test_empty_llm_reply_falls_back(make_host, repo_ref) -> None:
    runner, _ = _llm("   ")

    document = DocumentGenerator(make_host({}), runner).generate(repo_ref, README, _context(digest=RepoDigest()))

    assert document.strategy == STRATEGY_TEMPLATE


def test_generate_all_reports_progress(make_host, repo_ref) -> None:
    events = []

    class Sink:
        def report(self, event):
            events.append(event)

    documents = DocumentGenerator(make_host({})).generate_all(
        repo_ref, [README, ARCHITECTURE], _context(), progress=Sink()
    )

    assert [document.output_path for document in documents] == ["README.md", "docs/architecture/README.md"]
    assert [(event.phase, event.percent) for event in events] == [
        (ScanPhase.GENERATE_DOCS, 65),
        (ScanPhase.GENERATE_DOCS, 75),
    ]
    assert events[1].meta == {"index": 2, "total": 2, "targetType": "Architecture"}


def test_generate_checks_cancellation(make_host, repo_ref) -> None:
    host = make_host({})
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(ScanCancelled):
        DocumentGenerator(host).generate(repo_ref, README, _context(), cancel=cancel)

    assert host.lookups == []


def test_clean_model_markdown() -> None:
    assert clean_model_markdown("# A", None) == "# A\n"
    assert clean_model_markdown("```md\n# A\n```", None) == "# A\n"
    assert clean_model_markdown("  # Same  \n", "# Same") == "# Same"
