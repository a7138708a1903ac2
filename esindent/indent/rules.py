"""
ConstructRules — Per-construct indentation rules for ECMAScript syntax.

One handler per tree-sitter node kind. Each handler reads the shape of its
node and records "this token is N levels deeper than that token" entries in
the OffsetRegistry; handlers have no other effect.

After a node's own handler, two common passes run:
- Statements (and class fields): a semicolon ending its line returns to the
  statement's first token.
- Expressions: wrapping parentheses each add exactly one level, outward,
  independent of the wrapped construct's own rule.

Handlers run in pre-order, parents before children, so child rules and the
parenthesis pass may refine what a parent registered (last write wins).

Kinds without a handler are reported by visit() returning False; the
harness then ignores that subtree.
"""

from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from ..core.source import code_children, child_of_type, field, same_node
from ..core.tokens import (
    Token,
    is_arrow,
    is_brace,
    is_closing_brace,
    is_closing_bracket,
    is_closing_paren,
    is_not_closing_paren,
    is_opening_brace,
    is_opening_bracket,
    is_opening_paren,
    is_optional_chain,
    is_semicolon,
)
from ..errors import TokenNotFoundError

if TYPE_CHECKING:
    from tree_sitter import Node
    from ..core.source import SourceCode
    from ..config import IndentConfig
    from .offsets import OffsetRegistry


Handler = Callable[['Node'], None]


# =============================================================================
# Kind tables
# =============================================================================

# Binary-like constructs whose operands share one anchor across a chain
CHAIN_KINDS = frozenset({
    'assignment_expression',
    'augmented_assignment_expression',
    'assignment_pattern',
    'object_assignment_pattern',
    'binary_expression',
})

STATEMENT_KINDS = frozenset({
    'expression_statement', 'variable_declaration', 'lexical_declaration',
    'function_declaration', 'generator_function_declaration', 'class_declaration',
    'import_statement', 'export_statement',
    'if_statement', 'switch_statement', 'for_statement', 'for_in_statement',
    'while_statement', 'do_statement', 'try_statement', 'with_statement',
    'break_statement', 'continue_statement', 'return_statement', 'throw_statement',
    'empty_statement', 'labeled_statement', 'debugger_statement', 'statement_block',
    'field_definition',
})

EXPRESSION_KINDS = frozenset({
    # Single tokens
    'identifier', 'number', 'string', 'regex', 'true', 'false', 'null',
    'undefined', 'this', 'super',
    # Compound
    'template_string', 'object', 'array', 'function_expression', 'function',
    'arrow_function', 'generator_function', 'class', 'call_expression',
    'new_expression', 'member_expression', 'subscript_expression',
    'meta_property', 'await_expression', 'yield_expression', 'unary_expression',
    'update_expression', 'binary_expression', 'assignment_expression',
    'augmented_assignment_expression', 'ternary_expression',
    'sequence_expression', 'parenthesized_expression',
})

# Nodes whose tokens are placed by an ancestor rule
NOOP_KINDS = frozenset({
    # Single tokens
    'identifier', 'property_identifier', 'private_property_identifier',
    'shorthand_property_identifier', 'shorthand_property_identifier_pattern',
    'statement_identifier', 'number', 'string', 'string_fragment',
    'escape_sequence', 'regex', 'regex_pattern', 'regex_flags', 'true', 'false',
    'null', 'undefined', 'this', 'super', 'import', 'optional_chain',
    'hash_bang_line', 'debugger_statement',
    # Wrappers
    'expression_statement', 'empty_statement', 'parenthesized_expression',
    'template_substitution', 'else_clause', 'switch_body', 'class_heritage',
    'arguments', 'formal_parameters', 'computed_property_name', 'import_clause',
    'named_imports', 'namespace_export', 'export_clause', 'finally_clause',
})


class ConstructRules:
    """
    Indentation rule set for one file.

    Attributes:
        source: Token provider for the file
        offsets: Registry the handlers write into
        switch_case: Indent levels of `case` clauses inside a switch body
        handlers: node kind -> handler
    """

    def __init__(
        self,
        source: 'SourceCode',
        offsets: 'OffsetRegistry',
        config: Optional['IndentConfig'] = None,
    ):
        self.source = source
        self.offsets = offsets
        self.switch_case = config.switch_case if config is not None else 1
        self.handlers: Dict[str, Handler] = self._build_handlers()

    def _build_handlers(self) -> Dict[str, Handler]:
        handlers: Dict[str, Handler] = {kind: self._noop for kind in NOOP_KINDS}
        handlers.update({
            'program': self._program,
            # Lists and blocks
            'array': self._array,
            'array_pattern': self._array,
            'object': self._object,
            'object_pattern': self._object,
            'statement_block': self._block,
            'class_body': self._block,
            'class_static_block': self._class_static_block,
            'sequence_expression': self._sequence,
            'variable_declaration': self._variable_declaration,
            'lexical_declaration': self._variable_declaration,
            'variable_declarator': self._variable_declarator,
            # Operators
            'assignment_expression': self._chain,
            'augmented_assignment_expression': self._chain,
            'assignment_pattern': self._chain,
            'object_assignment_pattern': self._chain,
            'binary_expression': self._chain,
            'ternary_expression': self._ternary,
            'await_expression': self._prefixed,
            'unary_expression': self._prefixed,
            'update_expression': self._prefixed,
            'spread_element': self._prefixed,
            'rest_pattern': self._prefixed,
            'yield_expression': self._yield,
            # Control flow
            'if_statement': self._if,
            'while_statement': self._while,
            'with_statement': self._while,
            'do_statement': self._do,
            'for_statement': self._for,
            'for_in_statement': self._for_in,
            'switch_statement': self._switch,
            'switch_case': self._switch_case,
            'switch_default': self._switch_case,
            'try_statement': self._try,
            'catch_clause': self._catch,
            'labeled_statement': self._labeled,
            'break_statement': self._break,
            'continue_statement': self._break,
            'return_statement': self._return,
            'throw_statement': self._return,
            # Functions and classes
            'function_declaration': self._function,
            'function_expression': self._function,
            'function': self._function,
            'generator_function': self._function,
            'generator_function_declaration': self._function,
            'arrow_function': self._arrow_function,
            'method_definition': self._method,
            'class_declaration': self._class,
            'class': self._class,
            'field_definition': self._field_definition,
            'pair': self._pair,
            'pair_pattern': self._pair,
            # Access and calls
            'member_expression': self._member,
            'subscript_expression': self._subscript,
            'meta_property': self._meta_property,
            'call_expression': self._call,
            'new_expression': self._new,
            'template_string': self._template,
            # Modules
            'import_statement': self._import,
            'import_specifier': self._import_specifier,
            'namespace_import': self._trailing_tokens,
            'export_statement': self._export,
            'export_specifier': self._trailing_tokens,
        })
        return handlers

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def visit(self, node: 'Node') -> bool:
        """
        Run the handler for a node, then the common passes.

        Returns:
            False if the node kind has no rule (nothing was registered)
        """
        handler = self.handlers.get(node.type)
        if handler is None:
            return False
        handler(node)
        if node.type in STATEMENT_KINDS:
            self._trailing_semicolon(node)
        if node.type in EXPRESSION_KINDS:
            self._unwrap_parentheses(node)
        return True

    # -------------------------------------------------------------------------
    # Token helpers
    # -------------------------------------------------------------------------

    def _require(self, token: Optional[Token], description: str, node: 'Node') -> Token:
        if token is None:
            raise TokenNotFoundError(description, node.type, node.start_point[0] + 1)
        return token

    def _first(self, target) -> Token:
        token = self.source.get_first_token(target)
        if token is None:
            raise TokenNotFoundError("first token", target.type, target.start_point[0] + 1)
        return token

    def _last(self, target) -> Token:
        token = self.source.get_last_token(target)
        if token is None:
            raise TokenNotFoundError("last token", target.type, target.start_point[0] + 1)
        return token

    def _keyword(self, node: 'Node', value: str) -> Optional[Token]:
        """Token of a direct anonymous child such as `class` or `export`."""
        for child in node.children:
            if not child.is_named and child.type == value:
                return self._first(child)
        return None

    def _set_body(self, body: Optional['Node'], base: Token) -> None:
        """Braced bodies sit flush with their keyword; bare statements indent."""
        if body is None:
            return
        body_first = self._first(body)
        self.offsets.set_offset(body_first, 0 if is_opening_brace(body_first) else 1, base)

    def _property_key(self, first: Token, key: 'Node') -> Token:
        """Register a member key and return its last token."""
        offsets = self.offsets
        if key.type == 'computed_property_name':
            left_bracket = self._first(key)
            right_bracket = self._last(key)
            offsets.set_offset(self.source.get_tokens_between(first, left_bracket), 0, first)
            offsets.set_offset(left_bracket, 0, first)
            offsets.set_offset_element_list(code_children(key), left_bracket, right_bracket, 1)
            return right_bracket

        key_first = self._first(key)
        offsets.set_offset(self.source.get_tokens_between(first, key_first), 0, first)
        offsets.set_offset(key_first, 0, first)
        return self._last(key)

    # -------------------------------------------------------------------------
    # Program
    # -------------------------------------------------------------------------

    def _program(self, node: 'Node') -> None:
        for statement in code_children(node):
            token = self._first(statement)
            self.offsets.set_start_offset(token, self.source.base_level_for(token))

    # -------------------------------------------------------------------------
    # Lists and blocks
    # -------------------------------------------------------------------------

    def _array(self, node: 'Node') -> None:
        left = self._first(node)
        right = self.source.get_last_token(node, is_closing_bracket)
        self.offsets.set_offset_element_list(code_children(node), left, right, 1)

    def _object(self, node: 'Node') -> None:
        left = self._first(node)
        right = self.source.get_last_token(node, is_closing_brace)
        self.offsets.set_offset_element_list(code_children(node), left, right, 1)

    def _block(self, node: 'Node') -> None:
        self.offsets.set_offset_element_list(
            code_children(node), self._first(node), self._last(node), 1,
        )

    def _class_static_block(self, node: 'Node') -> None:
        self.offsets.set_offset(self._first(field(node, 'body')), 0, self._first(node))

    def _sequence(self, node: 'Node') -> None:
        self.offsets.set_offset_element_list(code_children(node), self._first(node), None, 0)

    def _variable_declaration(self, node: 'Node') -> None:
        declarators = [c for c in code_children(node) if c.type == 'variable_declarator']
        self.offsets.set_offset_element_list(declarators, self._first(node), None, 1)

    def _variable_declarator(self, node: 'Node') -> None:
        if field(node, 'value') is None:
            return
        id_token = self._first(node)
        eq_token = self._require(
            self.source.get_token_after(field(node, 'name')), "`=`", node,
        )
        init_token = self.source.get_token_after(eq_token)
        self.offsets.set_offset([eq_token, init_token], 1, id_token)

    # -------------------------------------------------------------------------
    # Operators
    # -------------------------------------------------------------------------

    def _root_left(self, node: 'Node') -> 'Node':
        """Outermost left operand of a run of chained binary-like parents."""
        target = node
        parent = target.parent
        while parent is not None and parent.type in CHAIN_KINDS:
            if is_opening_paren(self.source.get_token_before(target)):
                break
            target = parent
            parent = target.parent
        return field(target, 'left')

    def _chain(self, node: 'Node') -> None:
        left = field(node, 'left')
        op_token = self._require(
            self.source.get_token_after(left, is_not_closing_paren), "operator", node,
        )
        right_token = self._first(field(node, 'right'))
        self.offsets.set_offset(
            [op_token, right_token], 1, self._first(self._root_left(node)),
        )

    def _ternary(self, node: 'Node') -> None:
        source = self.source
        question = self._require(
            source.get_token_after(field(node, 'condition'), is_not_closing_paren), "`?`", node,
        )
        consequent_token = source.get_token_after(question)
        colon = self._require(
            source.get_token_after(field(node, 'consequence'), is_not_closing_paren), "`:`", node,
        )
        alternate_token = source.get_token_after(colon)

        # Parentheses around an alternate do not stop the climb.
        base = node
        while True:
            wrapper = base
            parent = wrapper.parent
            while parent is not None and parent.type == 'parenthesized_expression':
                wrapper = parent
                parent = wrapper.parent
            if (
                parent is None
                or parent.type != 'ternary_expression'
                or not same_node(field(parent, 'alternative'), wrapper)
            ):
                break
            base = parent
        base_token = self._first(base)

        self.offsets.set_offset([question, colon], 1, base_token)
        self.offsets.set_offset(consequent_token, 1, question)
        self.offsets.set_offset(alternate_token, 1, colon)

    def _prefixed(self, node: 'Node') -> None:
        # `await`, `...`, unary and update operators
        first = self._first(node)
        self.offsets.set_offset(self.source.get_token_after(first), 1, first)

    def _yield(self, node: 'Node') -> None:
        if not code_children(node):
            return
        tokens = self.source.get_first_tokens(node, 2)
        if len(tokens) < 2:
            return
        yield_token, second = tokens
        self.offsets.set_offset(second, 1, yield_token)
        if second.value == '*':
            self.offsets.set_offset(self.source.get_token_after(second), 1, yield_token)

    # -------------------------------------------------------------------------
    # Control flow
    # -------------------------------------------------------------------------

    def _if(self, node: 'Node') -> None:
        source = self.source
        if_token, left_paren = source.get_first_tokens(node, 2)
        consequence = field(node, 'consequence')
        right_paren = source.get_token_before(consequence, is_closing_paren)

        self.offsets.set_offset(left_paren, 1, if_token)
        self.offsets.set_offset(right_paren, 0, left_paren)
        self._set_body(consequence, if_token)

        alternative = field(node, 'alternative')
        if alternative is not None:
            else_token = self._first(alternative)
            self.offsets.set_offset(else_token, 0, if_token)
            statements = code_children(alternative)
            if statements:
                self._set_body(statements[0], else_token)

    def _while(self, node: 'Node') -> None:
        # while (...) and with (...)
        first = self._first(node)
        left_paren = self._require(self.source.get_token_after(first), "`(`", node)
        body = field(node, 'body')
        right_paren = self._require(
            self.source.get_token_before(body, is_closing_paren), "`)`", node,
        )
        self.offsets.set_offset(left_paren, 1, first)
        self.offsets.set_offset(right_paren, 0, left_paren)
        self._set_body(body, first)

    def _do(self, node: 'Node') -> None:
        do_token = self._first(node)
        body = field(node, 'body')
        condition = field(node, 'condition')
        while_token = self._require(
            self.source.get_token_after(body, is_not_closing_paren), "`while`", node,
        )
        left_paren = self._first(condition)
        right_paren = self._last(condition)

        self._set_body(body, do_token)
        self.offsets.set_offset(while_token, 0, do_token)
        self.offsets.set_offset(left_paren, 1, while_token)
        self.offsets.set_offset_element_list(code_children(condition), left_paren, right_paren, 1)

    def _for(self, node: 'Node') -> None:
        source = self.source
        for_token = self._first(node)
        left_paren = self._require(source.get_token_after(for_token), "`(`", node)
        body = field(node, 'body')
        right_paren = self._require(source.get_token_before(body), "`)`", node)
        clauses = [
            child for child in code_children(node)
            if child.start_byte >= left_paren.end and child.end_byte <= right_paren.start
        ]

        self.offsets.set_offset(left_paren, 1, for_token)
        self.offsets.set_offset_element_list(clauses, left_paren, right_paren, 1)
        self._set_body(body, for_token)

    def _for_in(self, node: 'Node') -> None:
        # for-in, for-of and for-await-of
        source = self.source
        for_token = self._first(node)
        await_token = self._keyword(node, 'await')
        left_paren = self._require(source.get_token_after(await_token or for_token), "`(`", node)
        left_token = source.get_token_after(left_paren)

        operator = field(node, 'operator')
        if operator is not None:
            in_or_of = self._first(operator)
        else:
            in_or_of = self._require(
                source.get_token_after(field(node, 'left'), is_not_closing_paren), "`in`/`of`", node,
            )
        right_token = source.get_token_after(in_or_of)
        body = field(node, 'body')
        right_paren = self._require(source.get_token_before(body), "`)`", node)

        self.offsets.set_offset(await_token, 0, for_token)
        self.offsets.set_offset(left_paren, 1, for_token)
        self.offsets.set_offset(left_token, 1, left_paren)
        self.offsets.set_offset([in_or_of, right_token], 1, left_token)
        self.offsets.set_offset(right_paren, 0, left_paren)
        self._set_body(body, for_token)

    def _switch(self, node: 'Node') -> None:
        switch_token = self._first(node)
        discriminant = field(node, 'value')
        left_paren = self._first(discriminant)
        right_paren = self._last(discriminant)
        body = field(node, 'body')
        left_brace = self._first(body)
        right_brace = self._last(body)

        self.offsets.set_offset(left_paren, 1, switch_token)
        self.offsets.set_offset_element_list(code_children(discriminant), left_paren, right_paren, 1)
        self.offsets.set_offset(left_brace, 0, switch_token)
        self.offsets.set_offset_element_list(
            code_children(body), left_brace, right_brace, self.switch_case,
        )

    def _switch_case(self, node: 'Node') -> None:
        source = self.source
        case_token = self._first(node)
        test = field(node, 'value')
        if test is not None:
            colon = self._require(source.get_token_after(test), "`:`", node)
            self.offsets.set_offset([self._first(test), colon], 1, case_token)
        else:
            colon = self._require(source.get_token_after(case_token), "`:`", node)
            self.offsets.set_offset(colon, 1, case_token)

        consequent = [
            child for child in code_children(node) if child.start_byte >= colon.end
        ]
        if len(consequent) == 1 and consequent[0].type == 'statement_block':
            self.offsets.set_offset(self._first(consequent[0]), 0, case_token)
        else:
            for statement in consequent:
                self.offsets.set_offset(self._first(statement), 1, case_token)

    def _try(self, node: 'Node') -> None:
        try_token = self._first(node)
        self.offsets.set_offset(self._first(field(node, 'body')), 0, try_token)

        handler = field(node, 'handler')
        if handler is not None:
            self.offsets.set_offset(self._first(handler), 0, try_token)

        finalizer = field(node, 'finalizer')
        if finalizer is not None:
            finally_block = field(finalizer, 'body')
            self.offsets.set_offset(
                [self._first(finalizer), self._first(finally_block) if finally_block else None],
                0,
                try_token,
            )

    def _catch(self, node: 'Node') -> None:
        catch_token = self._first(node)
        param = field(node, 'parameter')
        if param is not None:
            left_paren = self._require(self.source.get_token_before(param), "`(`", node)
            right_paren = self.source.get_token_after(param)
            self.offsets.set_offset(left_paren, 1, catch_token)
            self.offsets.set_offset_element_list([param], left_paren, right_paren, 1)
        self.offsets.set_offset(self._first(field(node, 'body')), 0, catch_token)

    def _labeled(self, node: 'Node') -> None:
        # Also the reactive `$: ...` statement of component scripts
        label_token = self._first(node)
        colon = self._require(self.source.get_token_after(label_token), "`:`", node)
        body_token = self.source.get_token_after(colon)
        self.offsets.set_offset([colon, body_token], 1, label_token)

    def _break(self, node: 'Node') -> None:
        if field(node, 'label') is None:
            return
        first = self._first(node)
        self.offsets.set_offset(self.source.get_token_after(first), 1, first)

    def _return(self, node: 'Node') -> None:
        # return and throw
        if not code_children(node):
            return
        first = self._first(node)
        self.offsets.set_offset(self.source.get_token_after(first), 1, first)

    # -------------------------------------------------------------------------
    # Functions and classes
    # -------------------------------------------------------------------------

    def _function(self, node: 'Node') -> None:
        source = self.source
        first = self._first(node)
        params = field(node, 'parameters')
        left_paren = self._first(params)
        name = field(node, 'name')

        # Modifiers before `*` or the name stay flush; the rest indent.
        token_offset = 0
        for token in source.get_tokens_between(first, left_paren):
            if token.value == '<':
                break
            if token.value == '*' or (name is not None and token.start == name.start_byte):
                token_offset = 1
            self.offsets.set_offset(token, token_offset, first)

        right_paren = self._last(params)
        self.offsets.set_offset(left_paren, 1, first)
        self.offsets.set_offset_element_list(code_children(params), left_paren, right_paren, 1)
        self.offsets.set_offset(self._first(field(node, 'body')), 0, first)

    def _arrow_function(self, node: 'Node') -> None:
        source = self.source
        tokens = source.get_first_tokens(node, 2)
        first = tokens[0]
        is_async = bool(node.children) and node.children[0].type == 'async'
        second = tokens[1] if len(tokens) > 1 else None
        left_token = second if is_async else first
        body = field(node, 'body')
        arrow_token = self._require(source.get_token_before(body, is_arrow), "`=>`", node)

        if is_async:
            self.offsets.set_offset(second, 1, first)
        if is_opening_paren(left_token):
            params_node = field(node, 'parameters')
            params = code_children(params_node) if params_node is not None else []
            right_paren = source.get_token_after(
                params[-1] if params else left_token, is_closing_paren,
            )
            self.offsets.set_offset_element_list(params, left_token, right_paren, 1)

        self.offsets.set_offset(arrow_token, 1, first)
        body_first = self._first(body)
        self.offsets.set_offset(body_first, 0 if is_opening_brace(body_first) else 1, first)

    def _method(self, node: 'Node') -> None:
        # Class and object methods, getters and setters
        first = self._first(node)
        last_key = self._property_key(first, field(node, 'name'))
        params = field(node, 'parameters')
        left_paren = self._first(params)
        right_paren = self._last(params)

        self.offsets.set_offset(
            self.source.get_tokens_between(last_key, left_paren), 1, last_key,
        )
        # The body aligns with the member, not with its parameters.
        self.offsets.set_offset(left_paren, 1, first)
        self.offsets.set_offset_element_list(code_children(params), left_paren, right_paren, 1)
        self.offsets.set_offset(self._first(field(node, 'body')), 0, first)

    def _member_value(self, first: Token, key: 'Node', value: Optional['Node']) -> None:
        last_key = self._property_key(first, key)
        if value is None:
            return
        init_token = self._first(value)
        self.offsets.set_offset(
            self.source.get_tokens_between(last_key, init_token) + [init_token], 1, last_key,
        )

    def _pair(self, node: 'Node') -> None:
        self._member_value(self._first(node), field(node, 'key'), field(node, 'value'))

    def _field_definition(self, node: 'Node') -> None:
        self._member_value(self._first(node), field(node, 'property'), field(node, 'value'))

    def _class(self, node: 'Node') -> None:
        class_token = self._keyword(node, 'class') or self._first(node)

        name = field(node, 'name')
        if name is not None:
            self.offsets.set_offset(self._first(name), 1, class_token)

        heritage = child_of_type(node, 'class_heritage')
        if heritage is not None:
            extends_token = self._first(heritage)
            super_class_token = self.source.get_token_after(extends_token)
            self.offsets.set_offset(extends_token, 1, class_token)
            self.offsets.set_offset(super_class_token, 1, extends_token)

        self.offsets.set_offset(self._first(field(node, 'body')), 0, class_token)

    # -------------------------------------------------------------------------
    # Access and calls
    # -------------------------------------------------------------------------

    def _member(self, node: 'Node') -> None:
        object_token = self._first(node)
        dot_token = self._require(
            self.source.get_token_before(field(node, 'property')), "`.`", node,
        )
        property_token = self.source.get_token_after(dot_token)
        self.offsets.set_offset([dot_token, property_token], 1, object_token)

    def _subscript(self, node: 'Node') -> None:
        source = self.source
        object_token = self._first(node)
        index = field(node, 'index')
        left_bracket = self._require(source.get_token_before(index, is_opening_bracket), "`[`", node)
        right_bracket = source.get_token_after(index, is_closing_bracket)

        for optional_token in source.get_tokens_between(
            field(node, 'object'), left_bracket, is_optional_chain,
        ):
            self.offsets.set_offset(optional_token, 1, object_token)
        self.offsets.set_offset(left_bracket, 1, object_token)
        self.offsets.set_offset_element_list([index], left_bracket, right_bracket, 1)

    def _meta_property(self, node: 'Node') -> None:
        # new.target, import.meta
        tokens = self.source.get_tokens(node)
        if len(tokens) >= 3:
            self.offsets.set_offset(tokens[1:3], 1, tokens[0])

    def _call(self, node: 'Node') -> None:
        source = self.source
        callee = field(node, 'function')
        arguments = field(node, 'arguments')
        if arguments is None:
            return

        if arguments.type == 'template_string':
            # Tagged template
            self.offsets.set_offset(self._first(arguments), 1, self._first(callee))
            return

        first = self._first(node)
        left_paren = self._first(arguments)
        right_paren = self._last(arguments)
        for optional_token in source.get_tokens_between(callee, left_paren, is_optional_chain):
            self.offsets.set_offset(optional_token, 1, first)
        self.offsets.set_offset(left_paren, 1, first)
        self.offsets.set_offset_element_list(code_children(arguments), left_paren, right_paren, 1)

    def _new(self, node: 'Node') -> None:
        new_token = self._first(node)
        constructor = field(node, 'constructor')
        constructor_token = self._first(constructor)
        self.offsets.set_offset(constructor_token, 1, new_token)

        arguments = field(node, 'arguments')
        if arguments is not None:
            left_paren = self._first(arguments)
            right_paren = self._last(arguments)
            self.offsets.set_offset(left_paren, 1, constructor_token)
            self.offsets.set_offset_element_list(
                code_children(arguments), left_paren, right_paren, 1,
            )

    def _template(self, node: 'Node') -> None:
        source = self.source
        first = self._first(node)
        substitutions = [c for c in node.children if c.type == 'template_substitution']
        # Literal text after each `}` stays flush; embedded expressions indent.
        quasi_tokens = [source.get_last_token(sub) for sub in substitutions]
        expression_tokens = [
            source.get_token_after(source.get_first_token(sub)) for sub in substitutions
        ]
        self.offsets.set_offset(quasi_tokens, 0, first)
        self.offsets.set_offset(expression_tokens, 1, first)

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    def _import(self, node: 'Node') -> None:
        source = self.source
        import_token = self._first(node)
        module_source = field(node, 'source')
        source_token = self._first(module_source)
        tokens = source.get_tokens_between(import_token, module_source)

        from_index = -1
        for i, token in enumerate(tokens):
            if token.value == 'from':
                from_index = i
        if from_index >= 0:
            from_token: Optional[Token] = tokens[from_index]
            before_tokens = tokens[:from_index]
            after_tokens = tokens[from_index + 1:] + [source_token]
        else:
            from_token = None
            before_tokens = tokens + [source_token]
            after_tokens = []

        removed = set()
        clause = child_of_type(node, 'import_clause')
        for part in code_children(clause) if clause is not None else []:
            if part.type == 'namespace_import':
                removed.update(source.get_tokens(part)[1:])
            elif part.type == 'named_imports':
                specifiers = [c for c in code_children(part) if c.type == 'import_specifier']
                if not specifiers:
                    continue
                left_brace = self._require(source.get_token_before(specifiers[0]), "`{`", node)
                right_brace = self._require(
                    source.get_token_after(specifiers[-1], is_closing_brace), "`}`", node,
                )
                self.offsets.set_offset_element_list(specifiers, left_brace, right_brace, 1)
                removed.update(source.get_tokens_between(left_brace, right_brace))
        before_tokens = [token for token in before_tokens if token not in removed]

        if all(is_brace(token) for token in before_tokens):
            self.offsets.set_offset(before_tokens, 0, import_token)
        else:
            self.offsets.set_offset(before_tokens, 1, import_token)
        if from_token is not None:
            self.offsets.set_offset(from_token, 0, import_token)
            self.offsets.set_offset(after_tokens, 1, from_token)

    def _import_specifier(self, node: 'Node') -> None:
        if field(node, 'alias') is not None:
            self._trailing_tokens(node)

    def _trailing_tokens(self, node: 'Node') -> None:
        # `* as ns`, `a as b`
        tokens = self.source.get_tokens(node)
        if tokens:
            self.offsets.set_offset(tokens[1:], 1, tokens[0])

    def _export(self, node: 'Node') -> None:
        source = self.source
        export_token = self._keyword(node, 'export') or self._first(node)
        declaration = field(node, 'declaration')

        if self._keyword(node, 'default') is not None:
            target = declaration or field(node, 'value')
            if target is None:
                return
            target_token = self._first(target)
            self.offsets.set_offset(
                source.get_tokens_between(export_token, target_token) + [target_token],
                1,
                export_token,
            )
            return

        if declaration is not None:
            # export var foo = 1;
            self.offsets.set_offset(self._first(declaration), 1, export_token)
            return

        module_source = field(node, 'source')
        clause = child_of_type(node, 'export_clause')
        if clause is not None:
            # export {foo, bar}; or export {foo, bar} from "mod";
            left_brace = self._first(clause)
            right_brace = self._last(clause)
            self.offsets.set_offset(left_brace, 0, export_token)
            self.offsets.set_offset_element_list(code_children(clause), left_brace, right_brace, 1)
            if module_source is not None:
                between = source.get_tokens_between(right_brace, module_source)
                if between:
                    from_token, rest = between[0], between[1:]
                    self.offsets.set_offset(from_token, 0, export_token)
                    self.offsets.set_offset(rest + [self._first(module_source)], 1, from_token)
        elif module_source is not None:
            self._export_all(node, export_token, module_source)

    def _export_all(self, node: 'Node', export_token: Token, module_source: 'Node') -> None:
        tokens = self.source.get_tokens_between(export_token, module_source)
        from_index = next((i for i, t in enumerate(tokens) if t.value == 'from'), None)
        if from_index is None:
            raise TokenNotFoundError("`from`", node.type, node.start_point[0] + 1)
        from_token = tokens[from_index]
        before_tokens = tokens[:from_index]
        after_tokens = tokens[from_index + 1:] + [self._first(module_source)]

        if child_of_type(node, 'namespace_export') is None:
            # export * from "mod"
            self.offsets.set_offset(before_tokens, 1, export_token)
        else:
            # export * as name from "mod"
            as_index = next((i for i, t in enumerate(before_tokens) if t.value == 'as'), None)
            if as_index is None or as_index == 0:
                raise TokenNotFoundError("`as`", node.type, node.start_point[0] + 1)
            self.offsets.set_offset(before_tokens[:as_index], 1, export_token)
            self.offsets.set_offset(before_tokens[as_index:], 1, before_tokens[as_index - 1])
        self.offsets.set_offset(from_token, 0, export_token)
        self.offsets.set_offset(after_tokens, 1, from_token)

    # -------------------------------------------------------------------------
    # Common passes
    # -------------------------------------------------------------------------

    def _noop(self, node: 'Node') -> None:
        pass

    def _trailing_semicolon(self, node: 'Node') -> None:
        source = self.source
        first = source.get_first_token(node)
        last = source.get_last_token(node)
        if node.type == 'field_definition':
            # Class field semicolons follow the node
            following = source.get_token_after(node)
            if is_semicolon(following):
                last = following
        if first is None or not is_semicolon(last) or first == last:
            return
        following = source.get_token_after(last)
        if following is None or last.line < following.line:
            self.offsets.set_offset(last, 0, first)

    def _unwrap_parentheses(self, node: 'Node') -> None:
        source = self.source
        first = source.get_first_token(node)
        left = source.get_token_before(node)
        right = source.get_token_after(node)
        while is_opening_paren(left) and is_closing_paren(right):
            self.offsets.set_offset(first, 1, left)
            self.offsets.set_offset(right, 0, left)
            first = left
            left = source.get_token_before(left)
            right = source.get_token_after(right)


def handled_kinds(rules: ConstructRules) -> List[str]:
    """Sorted list of node kinds with a rule."""
    return sorted(rules.handlers)
