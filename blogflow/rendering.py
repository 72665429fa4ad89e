"""Artifact composition for completed runs."""

from __future__ import annotations

from .contracts import Artifact, GenerationRequest

BODY_TEMPLATE = """# {title}

In today's rapidly evolving landscape, {lower} has become increasingly important...

## Introduction

This comprehensive guide will explore the key aspects of {lower}...

## Key Points

1. Understanding the fundamentals
2. Best practices and implementation
3. Future trends and considerations"""


def compose_artifact(request: GenerationRequest) -> Artifact:
    """Fill the fixed preview template from ``request.topic``.

    Audience, tone, length and the feature toggles do not change the output;
    a real content backend would plug in here.
    """
    topic = request.topic
    lower = topic.lower()
    title = f"{topic}: A Comprehensive Guide"
    return Artifact(
        title=title,
        meta_description=f"Learn everything about {lower} in this detailed guide...",
        body_markdown=BODY_TEMPLATE.format(title=title, lower=lower),
    )
