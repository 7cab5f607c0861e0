import importlib

mod = "jsonsval"
class LazyLoader:
    """
    Lazy loader for the jsonsval functions to speed up startup time.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "SchemaStore": (f"{mod}.schemastore", "SchemaStore"),
    "Schema": (f"{mod}.schema", "Schema"),
    "Validator": (f"{mod}.validator", "Validator"),
    "FormatChecker": (f"{mod}.formatchecker", "FormatChecker"),
    "SchemaConstructionError": (f"{mod}.validationerrors", "SchemaConstructionError"),
    "ListValidationException": (f"{mod}.validationerrors", "ListValidationException"),
    "detect_meta_schema": (f"{mod}.metaschemadetector", "detect_meta_schema"),
    "validate_json_against_schema": (f"{mod}.validator", "validate_json_against_schema"),
    "validate_instance": (f"{mod}.validate", "validate_instance"),
    "validate_file": (f"{mod}.validate", "validate_file"),
    "convert_schema_to_python": (f"{mod}.schematopython", "convert_schema_to_python"),
    "convert_schema_json_to_python": (f"{mod}.schematopython", "convert_schema_json_to_python"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
