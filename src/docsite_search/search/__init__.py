"""
Search index model and query engine package.

This package provides a pure-Python search stack for a static site's
precomputed index:
- models: Index entries, postings, results and snippets
- analyzers: Tokenizer and normalizing filters
- loader: Raw record validation and index file decoding
- inverted_index: Token -> postings mapping, built once
- ranking: Multi-field scoring and ordering
- snippet: Excerpts with highlight ranges
"""
