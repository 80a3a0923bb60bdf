# tests/conftest.py
"""
Shared simple-C sources, their expected listings, and small helpers.
"""

import pytest

from simplec_cfg.driver import build_program
from simplec_cfg.parser import parse
from simplec_cfg.pruning import prune_program


# ═══════════════════════════════════════════════════════════════════
#  SOURCES
# ═══════════════════════════════════════════════════════════════════

RETURN_ONLY_C = """\
int main() {
    return 0;
}
"""

EMPTY_FUNCTION_C = """\
void e() {
}
"""

EMPTY_ARMS_C = """\
int f(int x) {
    if (x) { } else { }
    return x;
}
"""

WHILE_C = """\
int g() {
    int i;
    i = 0;
    while (i < 10) {
        i = i + 1;
    }
    return i;
}
"""

IF_ELSE_C = """\
void h(int a) {
    if (a > 0) {
        a = 1;
    } else {
        a = 2;
    }
    a = 3;
}
"""

RETURN_IN_THEN_C = """\
void m(int a) {
    if (a) {
        return;
    }
    a = 1;
}
"""

BOTH_ARMS_RETURN_C = """\
int r(int a) {
    if (a) {
        return 1;
    } else {
        return 2;
    }
    a = 5;
}
"""

FOR_C = """\
int s(int n) {
    int i;
    int sum;
    sum = 0;
    for (i = 0; i < n; i = i + 1) {
        sum = sum + i;
    }
    return sum;
}
"""

INFINITE_WHILE_C = """\
void spin() {
    int x;
    while (1) {
        x = 1;
    }
}
"""

DEAD_AFTER_RETURN_C = """\
int k() {
    return 1;
    k = 2;
}
"""

PLACEHOLDER_C = """\
void p(int a) {
    a = 0;
    if (a) {
    }
    a = 1;
}
"""

GLOBALS_C = """\
int g;
int arr[10];
int main() {
    return g;
}
"""

# Nested control flow used for structural checks.
NESTED_C = """\
/* several functions, nested scopes */
int gcd(int a, int b) {
    while (b != 0) {
        int t;
        t = b;
        b = a % b;
        a = t;
    }
    return a;
}

void sort(int v[], int n) {
    int i;
    int j;
    int t;
    for (i = 0; i < n; i = i + 1) {
        for (j = i + 1; j < n; j = j + 1) {
            if (v[j] < v[i]) {
                t = v[i];
                v[i] = v[j];
                v[j] = t;
            }
        }
    }
}

int classify(int x) {
    if (x < 0) {
        return -1;
    } else if (x == 0) {
        return 0;
    }
    while (x > 100) {
        if (x % 2 == 0) {
            x = x / 2;
        } else {
            return 1;
        }
    }
    print(x);
    return 2;
}
"""

ALL_SOURCES = [
    RETURN_ONLY_C,
    EMPTY_FUNCTION_C,
    EMPTY_ARMS_C,
    WHILE_C,
    IF_ELSE_C,
    RETURN_IN_THEN_C,
    BOTH_ARMS_RETURN_C,
    FOR_C,
    INFINITE_WHILE_C,
    DEAD_AFTER_RETURN_C,
    PLACEHOLDER_C,
    GLOBALS_C,
    NESTED_C,
]


# ═══════════════════════════════════════════════════════════════════
#  EXPECTED LISTINGS
# ═══════════════════════════════════════════════════════════════════
# Statement lines end with "; " and signature fragments with " ", so the
# listings are spelled out line by line to keep the trailing blanks.


def _entry(fn, ret_type, args="-"):
    return (
        f"@{fn}_entry {{\n"
        f"   name: {fn}\n"
        f"   ret_type: {ret_type}\n"
        f"   args: {args}\n"
        "}\n"
        "Predecessors: -\n"
        f"Successors: {fn}_B0\n"
        "\n"
    )


def _exit(fn, preds):
    return (
        f"@{fn}_exit {{\n"
        "}\n"
        f"Predecessors: {preds}\n"
        "Successors: -\n"
        "\n"
    )


RETURN_ONLY_OUT = (
    "/*--- program: t.c ---*/\n"
    + _entry("main", "int ")
    + "@main_B0 {\n"
    "    return 0 ; \n"
    "}\n"
    "Predecessors: main_entry\n"
    "Successors: main_exit\n"
    "\n"
    + _exit("main", "main_B0")
)

WHILE_OUT = (
    "/*--- program: w.c ---*/\n"
    + _entry("g", "int ")
    + "@g_B0 {\n"
    "    int i ; \n"
    "    i = 0 ; \n"
    "}\n"
    "Predecessors: g_entry\n"
    "Successors: g_B1\n"
    "\n"
    "@g_B1 {\n"
    "    while( i < 10 )     # loop_end: g_B3\n"
    "}\n"
    "Predecessors: g_B0, g_B2\n"
    "Successors: g_B2, g_B3\n"
    "\n"
    "@g_B2 {\n"
    "    i = i + 1 ; \n"
    "}\n"
    "Predecessors: g_B1\n"
    "Successors: g_B1\n"
    "\n"
    "@g_B3 {\n"
    "    return i ; \n"
    "}\n"
    "Predecessors: g_B1\n"
    "Successors: g_exit\n"
    "\n"
    + _exit("g", "g_B3")
)

IF_ELSE_OUT = (
    "/*--- program: h.c ---*/\n"
    + _entry("h", "void ", "int a ")
    + "@h_B0 {\n"
    "    if( a > 0 )     # then: h_B1\n"
    + " " * 20 + "# else: h_B2\n"
    "}\n"
    "Predecessors: h_entry\n"
    "Successors: h_B1, h_B2\n"
    "\n"
    "@h_B1 {\n"
    "    a = 1 ; \n"
    "}\n"
    "Predecessors: h_B0\n"
    "Successors: h_B3\n"
    "\n"
    "@h_B2 {\n"
    "    a = 2 ; \n"
    "}\n"
    "Predecessors: h_B0\n"
    "Successors: h_B3\n"
    "\n"
    "@h_B3 {\n"
    "    a = 3 ; \n"
    "}\n"
    "Predecessors: h_B1, h_B2\n"
    "Successors: h_exit\n"
    "\n"
    + _exit("h", "h_B3")
)

EMPTY_ARMS_OUT = (
    "/*--- program: f.c ---*/\n"
    + _entry("f", "int ", "int x ")
    + "@f_B0 {\n"
    "    if( x ) { }\n"
    "    return x ; \n"
    "}\n"
    "Predecessors: f_entry\n"
    "Successors: f_exit\n"
    "\n"
    + _exit("f", "f_B0")
)

FOR_OUT = (
    "/*--- program: s.c ---*/\n"
    + _entry("s", "int ", "int n ")
    + "@s_B0 {\n"
    "    int i ; \n"
    "    int sum ; \n"
    "    sum = 0 ; \n"
    "    i = 0 ; \n"
    "}\n"
    "Predecessors: s_entry\n"
    "Successors: s_B1\n"
    "\n"
    "@s_B1 {\n"
    "    for( ; i < n ; )     # loop_end: s_B3\n"
    "}\n"
    "Predecessors: s_B0, s_B2\n"
    "Successors: s_B2, s_B3\n"
    "\n"
    "@s_B2 {\n"
    "    sum = sum + i ; \n"
    "    i = i + 1 ; \n"
    "}\n"
    "Predecessors: s_B1\n"
    "Successors: s_B1\n"
    "\n"
    "@s_B3 {\n"
    "    return sum ; \n"
    "}\n"
    "Predecessors: s_B1\n"
    "Successors: s_exit\n"
    "\n"
    + _exit("s", "s_B3")
)

GLOBALS_OUT = (
    "/*--- program: globals.c ---*/\n"
    "@Globals {\n"
    "    int g ; \n"
    "    int arr [ 10 ] ; \n"
    "}\n"
    "Predecessors: -\n"
    "Successors: -\n"
    "\n"
    + _entry("main", "int ")
    + "@main_B0 {\n"
    "    return g ; \n"
    "}\n"
    "Predecessors: main_entry\n"
    "Successors: main_exit\n"
    "\n"
    + _exit("main", "main_B0")
)


# ═══════════════════════════════════════════════════════════════════
#  HELPERS
# ═══════════════════════════════════════════════════════════════════

def build(source: str, filename: str = "<test>"):
    """Parse and construct, without pruning."""
    return build_program(parse(source, filename))


def build_pruned(source: str, filename: str = "<test>"):
    """Parse, construct and prune."""
    program = build(source, filename)
    prune_program(program)
    return program


def names(cfg, blocks):
    return cfg.sorted_names(blocks)


@pytest.fixture
def c_file(tmp_path):
    """Write a source string into ``tmp_path`` and return the path."""
    def _write(source: str, name: str = "prog.c"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path
    return _write
