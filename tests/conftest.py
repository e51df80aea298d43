from __future__ import annotations

import json
from typing import Callable, Dict

import pytest

from docdrift.models import RepoRef
from tests._fixtures.fake_host import FakeHost


@pytest.fixture
def repo_ref() -> RepoRef:
    """Reference used by every scan test."""
    return RepoRef(owner="acme", repo="storefront", ref="main")


@pytest.fixture
def make_host() -> Callable[..., FakeHost]:
    """Factory building an in-memory host from ``path -> content`` entries."""

    def _make(files: Dict[str, str], **kwargs) -> FakeHost:
        return FakeHost(files, **kwargs)

    return _make


@pytest.fixture
def next_app_files() -> Dict[str, str]:
    """A small Next.js + Prisma repository."""
    manifest = {
        "name": "storefront",
        "description": "Online store for widgets",
        "scripts": {"dev": "next dev", "build": "next build", "lint": "next lint"},
        "dependencies": {"next": "14.0.0", "react": "18.2.0", "@prisma/client": "5.0.0"},
        "devDependencies": {"prisma": "5.0.0", "typescript": "5.3.0"},
    }
    return {
        "package.json": json.dumps(manifest, indent=2),
        "README.md": "# Storefront\n\nOld readme.\n",
        "src/app/api/products/route.ts": "export async function GET() {}\nexport async function POST() {}\n",
        "src/app/api/products/[id]/route.ts": "export async function GET() {}\n",
        "src/app/page.tsx": "export default function Page() { return null }\n",
        "prisma/schema.prisma": "model Product { id Int @id }\n",
        "public/logo.png": "binary",
    }
