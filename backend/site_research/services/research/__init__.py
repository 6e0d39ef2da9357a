"""Site research package: crawl, snippet search, token budgets, synthesis.

Consumers import from the submodules directly::

    from site_research.services.research.pipeline import get_research_pipeline
"""
