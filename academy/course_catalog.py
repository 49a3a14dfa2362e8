"""Built-in course catalog seeded into the database on startup.

Lesson titles are generated ("Lesson 1", "Lesson 2", ...); only the module
structure is listed here.  Module and lesson slugs follow the content
directory layout used by :mod:`academy.quiz_store` (``module-1``,
``lesson-1``, ...).
"""

COURSE_CATALOG = [
    {
        "slug": "ddd-to-cqrs",
        "status": "published",
        "title": "From DDD to CQRS with AI Agents",
        "description": (
            "Learn to design complex domains and implement CQRS patterns with "
            "AI-assisted tooling. From bounded contexts to event sourcing, master "
            "the architecture patterns that scale."
        ),
        "modules": [
            {"title": "Introduction to DDD", "lesson_count": 5},
            {"title": "Bounded Contexts & Strategic Design", "lesson_count": 5},
            {"title": "Aggregates & Tactical Patterns", "lesson_count": 5},
            {"title": "Introduction to CQRS", "lesson_count": 4},
            {"title": "Event Sourcing Fundamentals", "lesson_count": 3},
            {"title": "AI-Assisted Implementation", "lesson_count": 3},
        ],
    },
    {
        "slug": "ddd-to-database",
        "status": "draft",
        "title": "DDD to Database Schema",
        "description": (
            "Transform your domain models into optimized database schemas. Bridge "
            "the gap between business logic and data persistence with proven patterns."
        ),
        "modules": [
            {"title": "Domain to Relational Mapping", "lesson_count": 4},
            {"title": "Aggregate Persistence Patterns", "lesson_count": 4},
            {"title": "Handling Relationships", "lesson_count": 3},
            {"title": "Schema Evolution & Migrations", "lesson_count": 4},
            {"title": "Performance Optimization", "lesson_count": 3},
        ],
    },
    {
        "slug": "data-driven-api",
        "status": "draft",
        "title": "Data-Driven REST API Development",
        "description": (
            "Build scalable, maintainable REST APIs driven by your data models. "
            "From design to deployment with modern best practices and documentation."
        ),
        "modules": [
            {"title": "REST API Design Principles", "lesson_count": 4},
            {"title": "Request Handling & Validation", "lesson_count": 4},
            {"title": "Error Handling & Responses", "lesson_count": 3},
            {"title": "OpenAPI Documentation", "lesson_count": 4},
            {"title": "Versioning & Evolution", "lesson_count": 3},
            {"title": "Security & Deployment", "lesson_count": 3},
        ],
    },
]
