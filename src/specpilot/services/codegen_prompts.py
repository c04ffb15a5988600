# src/specpilot/services/codegen_prompts.py

"""
Code generation prompt builder.

The generic prompt is composed from:

1. a base instruction block for the target (backend or frontend), whose
   deployment requirements depend on the deployment mode
2. the framework's display name and feature list
3. an optional database block (backend frameworks that declare database
   integration strings only)
4. an optional repository block asking for a pull request
5. the specification text, appended verbatim

Frameworks listed in ``TEMPLATE_OVERRIDES`` bypass the generic composition
entirely and render their own prompt from the same context.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from opentelemetry import trace

from specpilot.models.codegen_job import DeploymentMode, JobType
from specpilot.services.framework_catalog import (
    DatabaseOption,
    FrameworkConfig,
    get_database_option,
    get_framework_config,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

REPOSITORY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")

Section = Tuple[str, Tuple[str, ...]]


@dataclass(frozen=True)
class CodeGenPromptContext:
    target: JobType
    framework: str
    config: FrameworkConfig
    spec: str
    deployment_mode: DeploymentMode
    database: Optional[DatabaseOption] = None
    database_integration: Optional[str] = None
    repository: Optional[str] = None

    @property
    def containerized(self) -> bool:
        return self.deployment_mode == DeploymentMode.DOCKER


_DEPLOYMENT_REQUIREMENT = MappingProxyType({
    DeploymentMode.DOCKER: "Docker configuration (Dockerfile and docker-compose.yml)",
    DeploymentMode.LOCAL: (
        "Local development setup without containers (documented install and run "
        "commands, .env.example, no Dockerfile or docker-compose.yml)"
    ),
})

_BACKEND_PREFIX = "Generate a complete, production-ready"
_FRONTEND_PREFIX = "Generate a complete, professional-grade"
_INTRO = (
    "application based on the Swagger specification provided below. "
    "The application should include:"
)


def _backend_sections(mode: DeploymentMode) -> Tuple[Section, ...]:
    return (
        ("CORE REQUIREMENTS", (
            "Complete implementation of all API endpoints from the Swagger specification",
            "Proper project structure following framework best practices",
            "Database models/entities with appropriate relationships and validations",
            "Controllers/handlers with proper request/response handling",
            "Authentication and authorization implementation",
            "Input validation and error handling",
            "Comprehensive test suite (unit and integration tests)",
            _DEPLOYMENT_REQUIREMENT[mode],
            "Environment configuration and secrets management",
            "API documentation integration",
            "Logging and monitoring setup",
            "Health check endpoints",
        )),
        ("TECHNICAL REQUIREMENTS", (
            "Follow RESTful API conventions",
            "Implement proper HTTP status codes",
            "Use appropriate design patterns (Repository, Service, etc.)",
            "Include database migrations/schema setup",
            "Implement proper CORS configuration",
            "Add rate limiting and security middleware",
            "Include API versioning strategy",
            "Implement proper exception handling",
            "Add request/response logging",
            "Include performance optimization",
        )),
        ("TESTING & DEPLOYMENT", (
            "Unit tests for all business logic",
            "Integration tests for API endpoints",
            "Test fixtures and mock data",
            "CI/CD pipeline configuration",
            "Production-ready configuration",
            "Database seeding scripts",
            "API documentation (Swagger/OpenAPI integration)",
        )),
    )


def _frontend_sections(mode: DeploymentMode) -> Tuple[Section, ...]:
    return (
        ("CORE REQUIREMENTS", (
            "Complete UI implementation for all API endpoints from the Swagger specification",
            "Modern, responsive design with clean UX/UI",
            "Proper routing and navigation structure",
            "State management implementation",
            "API integration with proper error handling",
            "Authentication and authorization flows",
            "Form validation and user feedback",
            "Loading states and error boundaries",
            "Comprehensive component library",
            _DEPLOYMENT_REQUIREMENT[mode],
            "Environment configuration",
            "Build optimization and deployment setup",
        )),
        ("TECHNICAL REQUIREMENTS", (
            "TypeScript implementation (where applicable)",
            "Responsive design (mobile-first approach)",
            "Accessibility compliance (WCAG guidelines)",
            "SEO optimization",
            "Performance optimization (lazy loading, code splitting)",
            "Progressive Web App features (where applicable)",
            "Internationalization support (i18n)",
            "Theme support (light/dark mode)",
            "Component testing setup",
            "Proper error handling and user feedback",
            "API caching and optimization",
            "Security best practices (XSS, CSRF protection)",
        )),
        ("STYLING & COMPONENTS", (
            "Modern CSS framework integration (Tailwind CSS preferred)",
            "Reusable component architecture",
            "Design system implementation",
            "Animation and micro-interactions",
            "Consistent spacing and typography",
            "Icon library integration",
            "Image optimization",
            "Responsive breakpoints",
        )),
        ("TESTING & DEPLOYMENT", (
            "Component testing (Jest, Testing Library)",
            "E2E testing setup (Cypress/Playwright)",
            "Visual regression testing",
            "Performance testing",
            "Build optimization",
            "Static analysis and linting",
            "CI/CD pipeline configuration",
            "Production deployment configuration",
        )),
    )


def _render_section(title: str, items) -> str:
    lines = [f"{title}:"]
    lines.extend(f"- {item}" for item in items)
    return "\n".join(lines)


def _database_block(ctx: CodeGenPromptContext) -> Optional[str]:
    if ctx.database is None or ctx.database_integration is None:
        return None
    return _render_section("DATABASE CONFIGURATION", (
        f"Database: {ctx.database.label} ({ctx.database.description})",
        f"Integration: {ctx.database_integration}",
        f"Database features to leverage: {', '.join(ctx.database.features)}",
        f"Configure connection settings, migrations and seed data for {ctx.database.label}",
    ))


def _repository_block(ctx: CodeGenPromptContext) -> Optional[str]:
    if not ctx.repository:
        return None
    return _render_section("REPOSITORY", (
        f"Work in the GitHub repository {ctx.repository}",
        f"Open a pull request against {ctx.repository} containing all generated code",
        "Follow the existing conventions, structure and tooling already present in that repository",
    ))


def build_generic_prompt(ctx: CodeGenPromptContext) -> str:
    if ctx.target == JobType.BACKEND:
        prefix, sections = _BACKEND_PREFIX, _backend_sections(ctx.deployment_mode)
    else:
        prefix, sections = _FRONTEND_PREFIX, _frontend_sections(ctx.deployment_mode)

    blocks = [f"{prefix} {ctx.config.name} {_INTRO}"]
    blocks.extend(_render_section(title, items) for title, items in sections)
    blocks.append(_render_section(f"{ctx.config.name.upper()} SPECIFIC FEATURES", ctx.config.features))

    for optional in (_database_block(ctx), _repository_block(ctx)):
        if optional:
            blocks.append(optional)

    blocks.append(f"This is the Swagger specification:\n{ctx.spec}")
    return "\n\n".join(blocks)


def build_laravel_prompt(ctx: CodeGenPromptContext) -> str:
    """Narrative prompt for Laravel, with a container and a non-container variant."""
    version = ctx.config.name
    paragraphs = [
        f"You are a senior {version} developer. Build a complete, production-ready "
        f"{version} REST API that implements every endpoint described in the Swagger "
        "specification at the end of this message.",
        "Use Eloquent models with proper relationships, casts and fillable attributes, "
        "Form Request classes for validation, API Resources for every response shape, "
        "and thin controllers that delegate business rules to service classes. "
        "Protect routes with Laravel Sanctum, register them in routes/api.php and "
        f"cover each endpoint with feature tests ({', '.join(ctx.config.features)}).",
    ]

    if ctx.database is not None:
        integration = ctx.database_integration or f"the {ctx.database.label} connection"
        paragraphs.append(
            f"The application uses {ctx.database.label}. Configure {integration}, write "
            "reversible migrations for every schema in the specification and add "
            "factories and seeders with realistic sample data."
        )

    if ctx.containerized:
        paragraphs.append(
            "Ship the project with Docker: a Dockerfile based on the official PHP-FPM "
            "image with the required extensions, an nginx service and a "
            "docker-compose.yml that starts the application, the database and a queue "
            "worker. The README must explain how to run it with docker compose up."
        )
    else:
        paragraphs.append(
            "Do NOT use Docker, Laravel Sail or docker-compose. The project must run "
            "directly on a local PHP installation: document composer install, "
            "php artisan key:generate, php artisan migrate --seed and php artisan serve "
            "in the README, and provide a .env.example suited to a local setup."
        )

    paragraphs.append(
        "Add a GitHub Actions workflow that installs dependencies, runs the migrations "
        "against a test database and executes the test suite."
    )

    if ctx.repository:
        paragraphs.append(
            f"Commit the work to the GitHub repository {ctx.repository} and open a pull "
            "request against it, following the conventions already present in that "
            "repository."
        )

    paragraphs.append(f"This is the Swagger specification:\n{ctx.spec}")
    return "\n\n".join(paragraphs)


TemplateOverride = Callable[[CodeGenPromptContext], str]

TEMPLATE_OVERRIDES: Mapping[Tuple[JobType, str], TemplateOverride] = MappingProxyType({
    (JobType.BACKEND, "PHP Laravel"): build_laravel_prompt,
    (JobType.BACKEND, "PHP Laravel 12"): build_laravel_prompt,
})


def build_codegen_prompt(
    target: JobType | str,
    framework: str,
    spec: str,
    database: Optional[str] = None,
    repository: Optional[str] = None,
    deployment_mode: DeploymentMode | str = DeploymentMode.DOCKER,
) -> str:
    """
    Build the code generation prompt for one target.

    Raises:
        UnsupportedFrameworkError: framework missing from the framework table.
        ValueError: unknown database id or malformed repository name.
    """
    target = JobType(target)
    deployment_mode = DeploymentMode(deployment_mode)

    with tracer.start_as_current_span("service.build_codegen_prompt") as span:
        span.set_attribute("codegen.target", target.value)
        span.set_attribute("codegen.framework", framework)
        span.set_attribute("codegen.deployment_mode", deployment_mode.value)

        config = get_framework_config(target, framework)

        database_option = None
        integration = None
        if target == JobType.BACKEND and database:
            database_option = get_database_option(database)
            if database_option is None:
                raise ValueError(f"Unsupported database: {database}")
            integration = config.database_integration.get(database_option.value)

        if repository and not REPOSITORY_PATTERN.match(repository):
            raise ValueError(f"Repository must look like 'owner/name', got: {repository}")

        ctx = CodeGenPromptContext(
            target=target,
            framework=framework,
            config=config,
            spec=spec,
            deployment_mode=deployment_mode,
            database=database_option,
            database_integration=integration,
            repository=repository,
        )

        override = TEMPLATE_OVERRIDES.get((target, framework))
        span.set_attribute("codegen.override", override is not None)
        prompt = override(ctx) if override else build_generic_prompt(ctx)

        logger.debug(
            "Built %s prompt for %s (%d chars, override=%s)",
            target.value,
            framework,
            len(prompt),
            override is not None,
        )
        return prompt
