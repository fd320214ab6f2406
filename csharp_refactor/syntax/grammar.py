# Copyright 2025 Vijaykumar Singh <singhvjd@gmail.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""C# grammar loading and raw tree-sitter parsing."""

from typing import TYPE_CHECKING, Optional

import tree_sitter_c_sharp
from tree_sitter import Language, Parser

if TYPE_CHECKING:
    from tree_sitter import Tree

_language: Optional[Language] = None
_parser: Optional[Parser] = None


def get_language() -> Language:
    """The C# grammar, loaded once per process."""
    global _language
    if _language is None:
        _language = Language(tree_sitter_c_sharp.language())
    return _language


def get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser(get_language())
    return _parser


def parse_tree(source: str) -> "Tree":
    """Parse C# source text into a tree-sitter tree."""
    return get_parser().parse(source.encode("utf-8"))
