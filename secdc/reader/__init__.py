from secdc.reader.parser import lex, read, read_file, TokenStream
from secdc.reader.printer import to_source

__all__ = ["lex", "read", "read_file", "TokenStream", "to_source"]
