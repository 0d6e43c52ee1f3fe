"""
Rule Mining Module

Level-wise Apriori mining:
- Candidate generation (join + anti-monotonic prune)
- Parallel support counting
- Association rule extraction
- Bounded batch scheduling shared by all three
"""
