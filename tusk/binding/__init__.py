"""Declarative binding of request data into handler fields.

- **fields**: Locating reserved fields and deriving per-member binding specs
- **values**: Query string, path parameter and form value binding
- **body**: Content-type based body decoding
- **validation**: Constraint checks on bound groups
- **binder**: The per-request bind-then-validate sequence
"""

from tusk.binding.binder import FieldBinder
from tusk.binding.fields import MemberSpec, binding_spec, locate_field
from tusk.binding.validation import validate

__all__ = ["FieldBinder", "MemberSpec", "binding_spec", "locate_field", "validate"]
