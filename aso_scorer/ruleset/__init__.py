"""
Layered scoring configuration: Base → Vertical → Market → Client.

Modules
-------
merger    : merge_layers(): one generic ordered merge with ancestry.
detection : detect_vertical() / detect_market() from category and locale.
store     : ConfigStore protocol + in-memory, TOML and HTTP stores, LayerCache.
leaks     : detect_leaks(): overrides that do not fit the app's category.
resolver  : RulesetResolver: loads layers, degrades on failure, merges.
"""
