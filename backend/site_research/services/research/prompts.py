"""Prompt building for site research reports.

PROMPT DESIGN:
- Pareto framing: surface the critical 20% of risk factors that carry 80%
  of the underwriting understanding for the researched entity
- Six fixed sections: objective, context, scope, terminology, component
  breakdown, delivery structure
- Crawled site text and external search snippets are interpolated verbatim
  at the very end between delimiter lines; nothing here re-optimizes them
"""

CRAWLED_HEADER = "--- Crawled Content ---"
EXTERNAL_HEADER = "--- External Search Snippets for {domain} ---"
CONTENT_START = "--- Combined Content to Analyze Below ---"
CONTENT_END = "--- End of Combined Content ---"

RESEARCH_FRAMEWORK = """1. OBJECTIVE FORMULATION
Primary Objective: Apply a systematic framework that isolates the critical 20% of knowledge about the researched entity that yields 80% of the functional understanding an underwriter needs, and deliver it as a detailed underwriting report.
Success Metrics:

- The reader can apply core underwriting principles to the entity across varied scenarios.
- The reader can connect the entity's fundamental risk factors to their underwriting implications.
- The reader can tell critical information apart from peripheral detail without further help.
- The report is specific enough to support a decision about this single entity.

2. CONTEXT SPECIFICATION
Effective underwriting follows the Pareto principle: a minority of factors and data points gives disproportionate insight into risk assessment and pricing. Favor:

- Conceptual depth in risk assessment over encyclopedic breadth.
- Actionable understanding of the risk profile over passive description.
- Transferable mental models for assessing similar risks.
- A clear hierarchy from foundational exposures to mitigation strategies.

3. SCOPE DEFINITION
Included:

- Core underwriting principles relevant to the entity's line of business.
- A structured progression from risk identification to assessment and mitigation.
- Practical application of underwriting frameworks to the material provided below.
- A detailed report on this single entity, grounded in the supplied content.

Excluded:

- Historical development of insurance concepts unless it is essential to current practice.
- Peripheral details that do not change the risk picture.
- Technical minutiae without clear value for risk assessment or pricing.

4. TECHNICAL TERMINOLOGY

- Risk Density: concentration of critical risk factors relative to the total information available.
- Underwriting Leverage: explanatory power of a single risk factor across many underwriting scenarios.
- Underwriting Mental Models: frameworks for classifying complex risks quickly.
- Risk Hierarchy: ordering of risk information from foundational exposures to advanced mitigation.
- Risk Adjacency: relationship between connected risk types or principles.

5. COMPONENT BREAKDOWN
A. Domain & Entity Analysis

- Identify the insurance lines most relevant to the entity (property, casualty, cyber, professional liability and so on).
- Describe the entity's structure, operations and regulatory environment as evidenced by the content.

B. Knowledge Distillation

- Extract the high-leverage risk principles that dominate the underwriting decision.
- Identify the mental models that best explain the entity's risk profile.
- Map relationships and dependencies between risk factors.
- Note external knowledge domains (regulation, technology, economic trends) that sharpen the assessment.

C. Application Framework

- Illustrate how the identified principles apply through short, realistic scenarios.
- Point out information gaps that would change the assessment if filled.

6. DELIVERY STRUCTURE
Present the findings as a structured markdown report with these sections:

- Entity Overview
- Key Business Operations and Activities
- Identified Core Risks (the critical 20%)
- Potential Mitigation Strategies
- Underwriting Implications
- Conceptual Adjacencies in the Risk Profile

Use headings, bullet points and markdown tables where they add clarity. Base every finding on the content below and say so when the content is silent on a point.
"""


def build_combined_content(crawled_text: str, external_text: str, domain: str) -> str:
    """Join crawled and external text under labeled section headers."""
    return (
        f"{CRAWLED_HEADER}\n{crawled_text}\n\n"
        f"{EXTERNAL_HEADER.format(domain=domain)}\n{external_text}"
    )


def build_research_prompt(combined_content: str) -> str:
    """Wrap the optimized combined content in the analytical framework."""
    return f"{RESEARCH_FRAMEWORK}\n\n{CONTENT_START}\n{combined_content}\n{CONTENT_END}\n"
