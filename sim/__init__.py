"""sim: a small tree-walking interpreted language.

Basic program flow:
    1. Tokenizer (pure/lexical.py): source text -> list of Tokens ending in EOF
    2. Parser (pure/parser.py): Tokens -> one root Block (AST nodes in pure/grammar.py)
    3. Evaluator (pure/evaluator.py): walks the Block against a Context of functions and variable scopes

lang/ wraps the pipeline for running files and command-line mode.
"""

__version__ = "0.1.0"
