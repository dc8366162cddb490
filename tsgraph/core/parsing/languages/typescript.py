"""
TypeScript language configuration.

Defines TYPESCRIPT_CONFIG (.ts) and TSX_CONFIG (.tsx). Both share one
node-kind table; they differ only in the tree-sitter grammar used.

Where grammar releases renamed a node type, both spellings map to the same
SyntaxKind (e.g. "function" and "function_expression").
"""

from ..config import LanguageConfig
from ..syntax import SyntaxKind


# =============================================================================
# Grammar node type -> SyntaxKind
# =============================================================================

TYPESCRIPT_NODE_KINDS = {
    # Roots and blocks
    'program': SyntaxKind.PROGRAM,
    'statement_block': SyntaxKind.STATEMENT_BLOCK,
    'class_body': SyntaxKind.CLASS_BODY,
    'interface_body': SyntaxKind.INTERFACE_BODY,
    'enum_body': SyntaxKind.ENUM_BODY,
    'for_statement': SyntaxKind.FOR_STATEMENT,
    'for_in_statement': SyntaxKind.FOR_IN_STATEMENT,
    'catch_clause': SyntaxKind.CATCH_CLAUSE,

    # Names
    'identifier': SyntaxKind.IDENTIFIER,
    'type_identifier': SyntaxKind.TYPE_IDENTIFIER,
    'property_identifier': SyntaxKind.PROPERTY_IDENTIFIER,
    'private_property_identifier': SyntaxKind.PRIVATE_PROPERTY_IDENTIFIER,
    'shorthand_property_identifier': SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER,
    'shorthand_property_identifier_pattern': SyntaxKind.SHORTHAND_PROPERTY_IDENTIFIER_PATTERN,
    'this': SyntaxKind.THIS,

    # Declarations
    'lexical_declaration': SyntaxKind.LEXICAL_DECLARATION,
    'variable_declaration': SyntaxKind.VARIABLE_DECLARATION,
    'variable_declarator': SyntaxKind.VARIABLE_DECLARATOR,
    'function_declaration': SyntaxKind.FUNCTION_DECLARATION,
    'generator_function_declaration': SyntaxKind.GENERATOR_FUNCTION_DECLARATION,
    'function_signature': SyntaxKind.FUNCTION_SIGNATURE,
    'function': SyntaxKind.FUNCTION_EXPRESSION,
    'function_expression': SyntaxKind.FUNCTION_EXPRESSION,
    'generator_function': SyntaxKind.GENERATOR_FUNCTION,
    'arrow_function': SyntaxKind.ARROW_FUNCTION,
    'method_definition': SyntaxKind.METHOD_DEFINITION,
    'method_signature': SyntaxKind.METHOD_SIGNATURE,
    'abstract_method_signature': SyntaxKind.ABSTRACT_METHOD_SIGNATURE,
    'formal_parameters': SyntaxKind.FORMAL_PARAMETERS,
    'required_parameter': SyntaxKind.REQUIRED_PARAMETER,
    'optional_parameter': SyntaxKind.OPTIONAL_PARAMETER,
    'class_declaration': SyntaxKind.CLASS_DECLARATION,
    'abstract_class_declaration': SyntaxKind.ABSTRACT_CLASS_DECLARATION,
    'class': SyntaxKind.CLASS,
    'class_heritage': SyntaxKind.CLASS_HERITAGE,
    'public_field_definition': SyntaxKind.PUBLIC_FIELD_DEFINITION,
    'interface_declaration': SyntaxKind.INTERFACE_DECLARATION,
    'property_signature': SyntaxKind.PROPERTY_SIGNATURE,
    'type_alias_declaration': SyntaxKind.TYPE_ALIAS_DECLARATION,
    'enum_declaration': SyntaxKind.ENUM_DECLARATION,
    'enum_assignment': SyntaxKind.ENUM_ASSIGNMENT,

    # Patterns
    'object_pattern': SyntaxKind.OBJECT_PATTERN,
    'array_pattern': SyntaxKind.ARRAY_PATTERN,
    'pair_pattern': SyntaxKind.PAIR_PATTERN,
    'rest_pattern': SyntaxKind.REST_PATTERN,
    'assignment_pattern': SyntaxKind.ASSIGNMENT_PATTERN,
    'object_assignment_pattern': SyntaxKind.OBJECT_ASSIGNMENT_PATTERN,

    # Types
    'type_annotation': SyntaxKind.TYPE_ANNOTATION,
    'type_arguments': SyntaxKind.TYPE_ARGUMENTS,
    'type_parameters': SyntaxKind.TYPE_PARAMETERS,
    'type_parameter': SyntaxKind.TYPE_PARAMETER,
    'generic_type': SyntaxKind.GENERIC_TYPE,
    'nested_type_identifier': SyntaxKind.NESTED_TYPE_IDENTIFIER,
    'type_query': SyntaxKind.TYPE_QUERY,
    'implements_clause': SyntaxKind.IMPLEMENTS_CLAUSE,
    'extends_type_clause': SyntaxKind.EXTENDS_TYPE_CLAUSE,

    # Expressions
    'member_expression': SyntaxKind.MEMBER_EXPRESSION,

    # Modules
    'import_statement': SyntaxKind.IMPORT_STATEMENT,
    'import_clause': SyntaxKind.IMPORT_CLAUSE,
    'named_imports': SyntaxKind.NAMED_IMPORTS,
    'import_specifier': SyntaxKind.IMPORT_SPECIFIER,
    'namespace_import': SyntaxKind.NAMESPACE_IMPORT,
    'export_statement': SyntaxKind.EXPORT_STATEMENT,
    'export_clause': SyntaxKind.EXPORT_CLAUSE,
    'export_specifier': SyntaxKind.EXPORT_SPECIFIER,
    'string': SyntaxKind.STRING,
}


# =============================================================================
# Configuration
# =============================================================================

TYPESCRIPT_CONFIG = LanguageConfig(
    name="TypeScript",
    tree_sitter_name="typescript",
    extensions={'.ts', '.mts', '.cts'},
    node_kinds=TYPESCRIPT_NODE_KINDS,
)

TSX_CONFIG = LanguageConfig(
    name="TSX",
    tree_sitter_name="tsx",
    extensions={'.tsx'},
    node_kinds=TYPESCRIPT_NODE_KINDS,
)
