from __future__ import annotations

from typing import Dict, List

from .manifest import ModuleManifest, parse_manifest

# Token estimates are approximate (measured at roughly 4 chars/token).
MODULES: List[Dict[str, object]] = [
    {
        "id": "review-foundations",
        "title": "Review Foundations & Output Format",
        "category": "core",
        "token_estimate": 1200,
        "tags": ["security", "performance"],
    },
    {
        "id": "severity-matrix",
        "title": "Severity Priority Matrix (P0-P3)",
        "category": "core",
        "token_estimate": 600,
        "dependencies": ["review-foundations"],
        "tags": ["security", "performance"],
    },
    {
        "id": "owasp-top-10",
        "title": "OWASP Top 10 Patterns",
        "category": "specialized",
        "token_estimate": 4200,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "web"],
    },
    {
        "id": "auth-session",
        "title": "Authentication & Session Management",
        "category": "specialized",
        "token_estimate": 2800,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "auth"],
    },
    {
        "id": "injection-prevention",
        "title": "Injection Prevention (SQL, Command, Template)",
        "category": "specialized",
        "token_estimate": 2600,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "database"],
    },
    {
        "id": "secrets-management",
        "title": "Secrets & Credential Handling",
        "category": "specialized",
        "token_estimate": 1800,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "secrets"],
    },
    {
        "id": "api-security",
        "title": "API Security (AuthZ, Rate Limits, Input Validation)",
        "category": "specialized",
        "token_estimate": 3000,
        "dependencies": ["auth-session"],
        "tags": ["security", "api"],
    },
    {
        "id": "supply-chain",
        "title": "Dependency & Supply Chain Risk",
        "category": "specialized",
        "token_estimate": 1500,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "dependencies"],
    },
    {
        "id": "performance-core",
        "title": "Performance Fundamentals",
        "category": "specialized",
        "token_estimate": 2400,
        "dependencies": ["severity-matrix"],
        "tags": ["performance"],
    },
    {
        "id": "database-performance",
        "title": "Database & Query Performance",
        "category": "specialized",
        "token_estimate": 2200,
        "dependencies": ["performance-core"],
        "tags": ["performance", "database"],
    },
    {
        "id": "frontend-performance",
        "title": "Frontend Rendering & Bundle Performance",
        "category": "specialized",
        "token_estimate": 2000,
        "dependencies": ["performance-core"],
        "tags": ["performance", "frontend"],
    },
    {
        "id": "react-nextjs",
        "title": "React / Next.js",
        "category": "tech_stack",
        "token_estimate": 2500,
        "dependencies": ["owasp-top-10"],
        "tags": ["react", "nextjs", "frontend"],
    },
    {
        "id": "node-express",
        "title": "Node.js / Express",
        "category": "tech_stack",
        "token_estimate": 2100,
        "dependencies": ["owasp-top-10"],
        "tags": ["node", "express", "api"],
    },
    {
        "id": "python-django",
        "title": "Python / Django / FastAPI",
        "category": "tech_stack",
        "token_estimate": 2300,
        "dependencies": ["owasp-top-10"],
        "tags": ["python", "django", "fastapi", "api"],
    },
    {
        "id": "containers-k8s",
        "title": "Docker & Kubernetes",
        "category": "tech_stack",
        "token_estimate": 1900,
        "dependencies": ["secrets-management"],
        "tags": ["docker", "kubernetes", "infrastructure"],
    },
    {
        "id": "security-audit-checklist",
        "title": "Security Audit Checklist",
        "category": "checklist",
        "token_estimate": 1600,
        "dependencies": ["severity-matrix"],
        "tags": ["security", "checklist"],
        "checklist_items": 40,
    },
    {
        "id": "performance-checklist",
        "title": "Performance Review Checklist",
        "category": "checklist",
        "token_estimate": 1100,
        "dependencies": ["severity-matrix"],
        "tags": ["performance", "checklist"],
        "checklist_items": 20,
    },
    {
        "id": "pre-deploy-checklist",
        "title": "Pre-Deployment Checklist",
        "category": "checklist",
        "token_estimate": 900,
        "dependencies": ["severity-matrix"],
        "tags": ["deploy", "checklist"],
        "checklist_items": 25,
    },
]

# Decision tree: review goal -> recommended modules.
GOALS: Dict[str, List[str]] = {
    "quick-security-scan": ["owasp-top-10", "secrets-management"],
    "full-security-audit": [
        "owasp-top-10",
        "auth-session",
        "injection-prevention",
        "secrets-management",
        "api-security",
        "supply-chain",
        "security-audit-checklist",
    ],
    "api-review": ["api-security", "injection-prevention", "security-audit-checklist"],
    "performance-review": [
        "performance-core",
        "database-performance",
        "frontend-performance",
        "performance-checklist",
    ],
    "pre-deploy": ["secrets-management", "supply-chain", "pre-deploy-checklist"],
}


def builtin_manifest() -> ModuleManifest:
    """Built-in module catalog used when no manifest file is configured."""
    return parse_manifest(
        {"schema_version": "1.0", "modules": MODULES, "goals": GOALS}
    )
