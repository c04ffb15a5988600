# src/specpilot/services/framework_catalog.py

"""
Static framework and database tables used by the code generation prompts.

Everything here is read-only: lists are tuples and mappings are wrapped in
``MappingProxyType`` so nothing can mutate them at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from specpilot.exceptions import UnsupportedFrameworkError
from specpilot.models.codegen_job import JobType


@dataclass(frozen=True)
class FrameworkConfig:
    name: str
    features: Tuple[str, ...]
    # database id -> how the framework talks to that database
    database_integration: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )


@dataclass(frozen=True)
class DatabaseOption:
    value: str
    label: str
    description: str
    features: Tuple[str, ...]


def _db(**integration: str) -> Mapping[str, str]:
    return MappingProxyType(dict(integration))


BACKEND_FRAMEWORKS: Mapping[str, FrameworkConfig] = MappingProxyType({
    "Ruby on Rails": FrameworkConfig(
        name="Ruby on Rails 8",
        features=("ActiveRecord ORM", "RSpec testing", "Devise authentication", "Sidekiq background jobs"),
        database_integration=_db(
            postgresql="ActiveRecord with the pg adapter and db/schema.rb migrations",
            mysql="ActiveRecord with the mysql2 adapter and db/schema.rb migrations",
            mariadb="ActiveRecord with the mysql2 adapter configured for MariaDB",
            sqlite="ActiveRecord with the sqlite3 adapter (Rails 8 production-ready SQLite defaults)",
        ),
    ),
    "Node.js Express": FrameworkConfig(
        name="Node.js Express",
        features=("TypeScript", "Prisma ORM", "Jest testing", "JWT authentication", "Redis caching"),
        database_integration=_db(
            postgresql="Prisma with the postgresql provider and prisma migrate",
            mysql="Prisma with the mysql provider and prisma migrate",
            mariadb="Prisma with the mysql provider pointed at MariaDB",
            sqlite="Prisma with the sqlite provider and a file-based database",
        ),
    ),
    "Python Django": FrameworkConfig(
        name="Python Django",
        features=("Django REST Framework", "Celery", "pytest testing", "Django authentication"),
        database_integration=_db(
            postgresql="django.db.backends.postgresql with psycopg and Django migrations",
            mysql="django.db.backends.mysql with mysqlclient and Django migrations",
            mariadb="django.db.backends.mysql with mysqlclient against MariaDB",
            sqlite="django.db.backends.sqlite3 with Django migrations",
        ),
    ),
    "Python FastAPI": FrameworkConfig(
        name="Python FastAPI",
        features=("SQLAlchemy ORM", "Pydantic validation", "pytest testing", "OAuth2 authentication", "Async support"),
        database_integration=_db(
            postgresql="SQLAlchemy with asyncpg and Alembic migrations",
            mysql="SQLAlchemy with aiomysql and Alembic migrations",
            mariadb="SQLAlchemy with aiomysql against MariaDB and Alembic migrations",
            sqlite="SQLAlchemy with aiosqlite and Alembic migrations",
        ),
    ),
    "Python Flask": FrameworkConfig(
        name="Python Flask",
        features=("SQLAlchemy ORM", "Flask-RESTful", "pytest testing", "JWT authentication", "Marshmallow serialization"),
        database_integration=_db(
            postgresql="Flask-SQLAlchemy with psycopg and Flask-Migrate",
            mysql="Flask-SQLAlchemy with PyMySQL and Flask-Migrate",
            mariadb="Flask-SQLAlchemy with PyMySQL against MariaDB and Flask-Migrate",
            sqlite="Flask-SQLAlchemy with SQLite and Flask-Migrate",
        ),
    ),
    "Java Spring Boot": FrameworkConfig(
        name="Java Spring Boot",
        features=("Spring Data JPA", "Spring Security", "JUnit testing", "Maven/Gradle"),
        database_integration=_db(
            postgresql="Spring Data JPA with the PostgreSQL JDBC driver and Flyway migrations",
            mysql="Spring Data JPA with MySQL Connector/J and Flyway migrations",
            mariadb="Spring Data JPA with the MariaDB JDBC driver and Flyway migrations",
            sqlite="Spring Data JPA with the xerial sqlite-jdbc driver and Flyway migrations",
        ),
    ),
    "C# .NET Core": FrameworkConfig(
        name="C# .NET Core Web API",
        features=("Entity Framework Core", "xUnit testing", "JWT authentication", "Swagger integration"),
        database_integration=_db(
            postgresql="Entity Framework Core with Npgsql and EF migrations",
            mysql="Entity Framework Core with Pomelo.EntityFrameworkCore.MySql and EF migrations",
            mariadb="Entity Framework Core with Pomelo.EntityFrameworkCore.MySql against MariaDB",
            sqlite="Entity Framework Core with Microsoft.EntityFrameworkCore.Sqlite",
        ),
    ),
    "C# ASP.NET Core": FrameworkConfig(
        name="C# ASP.NET Core",
        features=("Entity Framework Core", "Identity Framework", "xUnit testing", "SignalR", "Blazor components"),
        database_integration=_db(
            postgresql="Entity Framework Core with Npgsql and EF migrations",
            mysql="Entity Framework Core with Pomelo.EntityFrameworkCore.MySql and EF migrations",
            mariadb="Entity Framework Core with Pomelo.EntityFrameworkCore.MySql against MariaDB",
            sqlite="Entity Framework Core with Microsoft.EntityFrameworkCore.Sqlite",
        ),
    ),
    "Go Gin": FrameworkConfig(
        name="Go Gin framework",
        features=("GORM ORM", "Go testing", "JWT authentication", "Redis integration", "Docker optimization"),
        database_integration=_db(
            postgresql="GORM with the postgres driver and golang-migrate",
            mysql="GORM with the mysql driver and golang-migrate",
            mariadb="GORM with the mysql driver against MariaDB and golang-migrate",
            sqlite="GORM with the sqlite driver and golang-migrate",
        ),
    ),
    "Go Fiber": FrameworkConfig(
        name="Go Fiber framework",
        features=("GORM ORM", "Go testing", "JWT middleware", "High performance", "Swagger integration"),
        database_integration=_db(
            postgresql="GORM with the postgres driver and golang-migrate",
            mysql="GORM with the mysql driver and golang-migrate",
            mariadb="GORM with the mysql driver against MariaDB and golang-migrate",
            sqlite="GORM with the sqlite driver and golang-migrate",
        ),
    ),
    "Go Echo": FrameworkConfig(
        name="Go Echo framework",
        features=("GORM ORM", "Go testing", "JWT middleware", "WebSocket support", "Prometheus metrics"),
        database_integration=_db(
            postgresql="GORM with the postgres driver and golang-migrate",
            mysql="GORM with the mysql driver and golang-migrate",
            mariadb="GORM with the mysql driver against MariaDB and golang-migrate",
            sqlite="GORM with the sqlite driver and golang-migrate",
        ),
    ),
    "PHP Laravel": FrameworkConfig(
        name="PHP Laravel 11",
        features=("Eloquent ORM", "PHPUnit testing", "Laravel Sanctum", "Queue jobs", "Artisan commands"),
        database_integration=_db(
            postgresql="Eloquent with the pgsql connection and Laravel migrations",
            mysql="Eloquent with the mysql connection and Laravel migrations",
            mariadb="Eloquent with the mariadb connection and Laravel migrations",
            sqlite="Eloquent with the sqlite connection and Laravel migrations",
        ),
    ),
    "PHP Laravel 12": FrameworkConfig(
        name="PHP Laravel 12",
        features=("Eloquent ORM", "Pest testing", "Laravel Sanctum", "Queue jobs", "Artisan commands"),
        database_integration=_db(
            postgresql="Eloquent with the pgsql connection and Laravel migrations",
            mysql="Eloquent with the mysql connection and Laravel migrations",
            mariadb="Eloquent with the mariadb connection and Laravel migrations",
            sqlite="Eloquent with the sqlite connection and Laravel migrations",
        ),
    ),
    "PHP Symfony": FrameworkConfig(
        name="PHP Symfony",
        features=("Doctrine ORM", "PHPUnit testing", "Symfony Security", "Messenger component", "API Platform"),
        database_integration=_db(
            postgresql="Doctrine DBAL with pdo_pgsql and Doctrine Migrations",
            mysql="Doctrine DBAL with pdo_mysql and Doctrine Migrations",
            mariadb="Doctrine DBAL with pdo_mysql against MariaDB and Doctrine Migrations",
            sqlite="Doctrine DBAL with pdo_sqlite and Doctrine Migrations",
        ),
    ),
    "Rust Actix": FrameworkConfig(
        name="Rust Actix Web",
        features=("Diesel ORM", "Rust testing", "JWT authentication", "High performance", "Async support"),
        database_integration=_db(
            postgresql="Diesel with the postgres feature and diesel_migrations",
            mysql="Diesel with the mysql feature and diesel_migrations",
            mariadb="Diesel with the mysql feature against MariaDB and diesel_migrations",
            sqlite="Diesel with the sqlite feature and diesel_migrations",
        ),
    ),
    "Rust Axum": FrameworkConfig(
        name="Rust Axum framework",
        features=("SQLx", "Rust testing", "Tower middleware", "Tokio async", "Serde serialization"),
        database_integration=_db(
            postgresql="SQLx with the postgres feature and sqlx migrate",
            mysql="SQLx with the mysql feature and sqlx migrate",
            mariadb="SQLx with the mysql feature against MariaDB and sqlx migrate",
            sqlite="SQLx with the sqlite feature and sqlx migrate",
        ),
    ),
    "Kotlin Spring Boot": FrameworkConfig(
        name="Kotlin Spring Boot",
        features=("Spring Data JPA", "Spring Security", "JUnit testing", "Coroutines", "Kotlin DSL"),
        database_integration=_db(
            postgresql="Spring Data JPA with the PostgreSQL JDBC driver and Flyway migrations",
            mysql="Spring Data JPA with MySQL Connector/J and Flyway migrations",
            mariadb="Spring Data JPA with the MariaDB JDBC driver and Flyway migrations",
            sqlite="Spring Data JPA with the xerial sqlite-jdbc driver and Flyway migrations",
        ),
    ),
    "Scala Play": FrameworkConfig(
        name="Scala Play Framework",
        features=("Slick ORM", "ScalaTest", "Play authentication", "Akka actors", "JSON handling"),
        database_integration=_db(
            postgresql="Slick with the PostgresProfile and Play evolutions",
            mysql="Slick with the MySQLProfile and Play evolutions",
            mariadb="Slick with the MySQLProfile against MariaDB and Play evolutions",
            sqlite="Slick with the SQLiteProfile and Play evolutions",
        ),
    ),
    "Elixir Phoenix": FrameworkConfig(
        name="Elixir Phoenix",
        features=("Ecto ORM", "ExUnit testing", "Guardian authentication", "LiveView", "PubSub"),
        database_integration=_db(
            postgresql="Ecto with Postgrex and Ecto migrations",
            mysql="Ecto with MyXQL and Ecto migrations",
            mariadb="Ecto with MyXQL against MariaDB and Ecto migrations",
            sqlite="Ecto with ecto_sqlite3 and Ecto migrations",
        ),
    ),
    "Node.js Serverless": FrameworkConfig(
        name="Node.js Serverless (AWS Lambda)",
        features=("Serverless Framework", "DynamoDB", "API Gateway", "CloudFormation", "Jest testing"),
    ),
    "Python Serverless": FrameworkConfig(
        name="Python Serverless (AWS Lambda)",
        features=("Serverless Framework", "DynamoDB", "API Gateway", "boto3", "pytest testing"),
    ),
    "Go Serverless": FrameworkConfig(
        name="Go Serverless (AWS Lambda)",
        features=("AWS SDK", "DynamoDB", "API Gateway", "CloudFormation", "Go testing"),
    ),
    "Node.js Microservices": FrameworkConfig(
        name="Node.js Microservices",
        features=("Express/Fastify", "Docker", "Kubernetes", "Message queues", "Service discovery"),
    ),
    "Java Microservices": FrameworkConfig(
        name="Java Spring Boot Microservices",
        features=("Spring Cloud", "Docker", "Kubernetes", "Eureka", "Config Server"),
    ),
    "Python Microservices": FrameworkConfig(
        name="Python Microservices",
        features=("FastAPI/Flask", "Docker", "Kubernetes", "Celery", "Service mesh"),
    ),
    "Go Microservices": FrameworkConfig(
        name="Go Microservices",
        features=("gRPC", "Docker", "Kubernetes", "Consul", "Prometheus"),
    ),
})


FRONTEND_FRAMEWORKS: Mapping[str, FrameworkConfig] = MappingProxyType({
    "Next.js": FrameworkConfig("Next.js", ("TypeScript", "Tailwind CSS", "App Router", "Server Components", "Vercel deployment")),
    "React": FrameworkConfig("React", ("TypeScript", "React Router", "Zustand/Redux Toolkit", "Tailwind CSS", "Vite")),
    "Gatsby": FrameworkConfig("Gatsby", ("TypeScript", "GraphQL", "Tailwind CSS", "PWA", "Static generation")),
    "Remix": FrameworkConfig("Remix", ("TypeScript", "Tailwind CSS", "Progressive enhancement", "Nested routing", "Form handling")),
    "NuxtJS": FrameworkConfig("NuxtJS", ("TypeScript", "Tailwind CSS", "Pinia", "Auto-imports", "SSR/SSG")),
    "Vue.js": FrameworkConfig("Vue.js 3", ("TypeScript", "Vue Router", "Pinia", "Tailwind CSS", "Composition API")),
    "Quasar": FrameworkConfig("Quasar Framework", ("TypeScript", "Vue 3", "Material Design", "Cross-platform", "PWA")),
    "Angular": FrameworkConfig("Angular", ("TypeScript", "Angular Router", "NgRx", "Angular Material", "PWA")),
    "Ionic Angular": FrameworkConfig("Ionic Angular", ("TypeScript", "Ionic UI", "Capacitor", "Angular", "Mobile-first")),
    "SvelteKit": FrameworkConfig("SvelteKit", ("TypeScript", "Tailwind CSS", "Svelte stores", "SSR/SSG", "Adapter system")),
    "Svelte": FrameworkConfig("Svelte", ("TypeScript", "Svelte stores", "Tailwind CSS", "Vite", "Component-based")),
    "React Native Expo": FrameworkConfig("React Native with Expo", ("TypeScript", "Expo SDK", "React Navigation", "Expo Router", "OTA updates")),
    "Electron": FrameworkConfig("Electron", ("TypeScript", "React/Vue", "Node.js integration", "Auto-updater", "Native menus")),
    "Astro": FrameworkConfig("Astro", ("TypeScript", "Component islands", "Multiple frameworks", "Static generation", "Tailwind CSS")),
    "Vite + React": FrameworkConfig("Vite + React", ("TypeScript", "React Router", "Tailwind CSS", "Fast HMR", "Modern build")),
    "Vite + Vue": FrameworkConfig("Vite + Vue", ("TypeScript", "Vue Router", "Pinia", "Tailwind CSS", "Fast HMR")),
    "Flutter": FrameworkConfig("Flutter", ("Dart", "Material Design", "Cupertino", "State management", "Cross-platform")),
    "React Native": FrameworkConfig("React Native", ("TypeScript", "React Navigation", "Expo", "NativeBase/Tamagui", "AsyncStorage")),
    "Ionic": FrameworkConfig("Ionic", ("TypeScript", "Ionic UI", "Capacitor", "Angular/React/Vue", "Mobile-first")),
    "Xamarin": FrameworkConfig("Xamarin", ("C#", "XAML", "Cross-platform", "Native performance", "Microsoft ecosystem")),
    "Tauri": FrameworkConfig("Tauri", ("Rust backend", "Web frontend", "Small bundle", "Security-focused", "Cross-platform")),
    "Flutter Desktop": FrameworkConfig("Flutter Desktop", ("Dart", "Cross-platform", "Native performance", "Material Design", "Desktop-specific APIs")),
})


DATABASE_OPTIONS: Mapping[str, DatabaseOption] = MappingProxyType({
    "postgresql": DatabaseOption(
        value="postgresql",
        label="PostgreSQL",
        description="Advanced open-source relational database",
        features=("ACID compliance", "JSON/JSONB support", "Full-text search", "Advanced indexing"),
    ),
    "mysql": DatabaseOption(
        value="mysql",
        label="MySQL",
        description="Popular open-source relational database",
        features=("High performance", "Replication", "InnoDB storage engine", "Wide hosting support"),
    ),
    "mariadb": DatabaseOption(
        value="mariadb",
        label="MariaDB",
        description="Community-developed fork of MySQL",
        features=("MySQL compatibility", "Galera clustering", "Columnar storage", "Open governance"),
    ),
    "sqlite": DatabaseOption(
        value="sqlite",
        label="SQLite",
        description="Lightweight embedded file-based database",
        features=("Zero configuration", "Single-file storage", "Serverless", "Ideal for prototypes"),
    ),
})


_TABLES: Mapping[JobType, Mapping[str, FrameworkConfig]] = MappingProxyType({
    JobType.BACKEND: BACKEND_FRAMEWORKS,
    JobType.FRONTEND: FRONTEND_FRAMEWORKS,
})


def get_framework_config(target: JobType, framework: str) -> FrameworkConfig:
    """Look up a framework or raise ``UnsupportedFrameworkError``."""
    config = _TABLES[JobType(target)].get(framework)
    if config is None:
        raise UnsupportedFrameworkError(JobType(target).value, framework)
    return config


def get_database_option(database: Optional[str]) -> Optional[DatabaseOption]:
    if not database:
        return None
    return DATABASE_OPTIONS.get(database.lower())


def list_frameworks(target: JobType) -> Tuple[str, ...]:
    return tuple(_TABLES[JobType(target)].keys())
