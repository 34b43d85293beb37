"""
Text normalization for listing fields.

Modules
-------
tokenizer : tokenize() + analyze_text(): normalization and noise split.
stopwords : STOPWORDS base set + build_stopwords() for ruleset additions.
"""
