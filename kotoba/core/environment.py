"""Lexical scopes for the kotoba language. Scopes live in an arena (Environment.scopes) and are addressed by integer
handle; each scope stores its parent's handle, so the chain can be walked without scopes referencing each other.
"""


class Scope:
    """A single scope record: variable bindings, function bindings, and the handle of the parent scope."""

    def __init__(self, parent=None):
        self.parent = parent
        self.variables = {}
        self.functions = {}


class Environment:
    """Arena of Scopes. The root scope (handle ROOT) has no parent and persists for the whole session."""
    ROOT = 0

    def __init__(self, builtins=None):
        self.scopes = {Environment.ROOT: Scope()}
        self._next_handle = Environment.ROOT + 1

        if builtins:
            self.scopes[Environment.ROOT].functions.update(builtins)

    def extend(self, parent):
        """Creates a child scope of parent and returns its handle."""
        if parent not in self.scopes:
            raise KeyError(f"no scope with handle {parent}")

        handle = self._next_handle
        self._next_handle += 1

        self.scopes[handle] = Scope(parent)
        return handle

    def discard(self, handle):
        """Removes a finished child scope from the arena. The root is never removed."""
        if handle != Environment.ROOT:
            del self.scopes[handle]

    def chain(self, handle):
        """Yields the scopes from handle outwards to the root."""
        while handle is not None:
            scope = self.scopes[handle]
            yield scope
            handle = scope.parent

    def lookup(self, handle, name):
        """Returns the innermost binding of variable name visible from handle. Raises KeyError if there is none."""
        for scope in self.chain(handle):
            if name in scope.variables:
                return scope.variables[name]
        raise KeyError(name)

    def lookup_function(self, handle, name):
        """Returns the innermost function bound to name visible from handle. Raises KeyError if there is none."""
        for scope in self.chain(handle):
            if name in scope.functions:
                return scope.functions[name]
        raise KeyError(name)

    def assign(self, handle, name, value):
        """Binds name in the scope handle itself, shadowing any outer binding of the same name."""
        self.scopes[handle].variables[name] = value

    def assign_nonlocal(self, handle, name, value):
        """Mutates the innermost existing binding of name visible from handle. Returns whether or not one was found;
        if not, nothing is bound.
        """
        for scope in self.chain(handle):
            if name in scope.variables:
                scope.variables[name] = value
                return True
        return False

    def declare_function(self, handle, name, function):
        """Binds function to name in the scope handle."""
        self.scopes[handle].functions[name] = function

    def __contains__(self, handle):
        return handle in self.scopes

    def __len__(self):
        return len(self.scopes)
