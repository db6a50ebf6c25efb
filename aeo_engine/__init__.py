"""
AEO Opportunity Engine

Tracks how a brand performs against its competitors inside AI answer
engines and turns the gaps into content work:
1. Aggregates visibility / share-of-answer / sentiment per query
2. Classifies queries and flags thresholded opportunities
3. Resolves how the brand can realistically reach each cited source
4. Drafts one recommendation per priority query with Claude
5. Scores drafted content for answer-engine scrapability
"""

__version__ = "0.1.0"
