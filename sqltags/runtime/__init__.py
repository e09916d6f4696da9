"""sqltags runtime: per-invocation evaluation state, expressions and type handlers."""
