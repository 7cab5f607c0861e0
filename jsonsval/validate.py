"""Validates JSON instance files against JSON schemas.

Instance files may hold a single JSON document, a JSON array of instances,
or JSON Lines.
"""

import json
import logging
import sys
from typing import Any, List, Tuple

from jsonsval.schemastore import SchemaStore
from jsonsval.validator import Validator

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of validating a JSON instance against a schema."""

    def __init__(self, is_valid: bool, errors: List[str] = None, instance_path: str = None):
        self.is_valid = is_valid
        self.errors = errors or []
        self.instance_path = instance_path

    def __str__(self) -> str:
        if self.is_valid:
            return "✓ Valid" + (f": {self.instance_path}" if self.instance_path else "")
        prefix = f"{self.instance_path}: " if self.instance_path else ""
        return f"✗ Invalid: {prefix}" + "; ".join(self.errors)

    def __repr__(self) -> str:
        return f"ValidationResult(is_valid={self.is_valid}, errors={self.errors})"


def validate_instance(instance: Any, schema: Any, validator: Validator = None) -> ValidationResult:
    """Validates a decoded JSON instance against a decoded schema document or a Schema node.

    Args:
        instance: The JSON value to validate
        schema: The schema document, or a Schema built by a SchemaStore
        validator: Optional configured Validator

    Returns:
        ValidationResult with validation status and any errors
    """
    if isinstance(schema, (dict, bool)):
        schema = SchemaStore().load_schema_json(schema)
    validator = validator or Validator()
    errors = validator.validate_all(schema, instance)
    return ValidationResult(is_valid=not errors, errors=[str(error) for error in errors])


def load_instances(instance_file: str, schema_is_array: bool = False) -> Tuple[List[Any], List[str]]:
    """Reads the instances held by a file.

    Args:
        instance_file: Path to JSON file (single document, array, or JSONL)
        schema_is_array: Treat a top-level array as one instance rather than a list of instances

    Returns:
        The instances and a display path for each
    """
    with open(instance_file, 'r', encoding='utf-8') as f:
        content = f.read().strip()

    instances = []
    instance_paths = []
    try:
        data = json.loads(content)
        if isinstance(data, list) and not schema_is_array:
            instances = data
            instance_paths = [f"{instance_file}[{i}]" for i in range(len(data))]
        else:
            instances = [data]
            instance_paths = [instance_file]
    except json.JSONDecodeError:
        for i, line in enumerate(content.split('\n')):
            line = line.strip()
            if not line:
                continue
            try:
                instances.append(json.loads(line))
                instance_paths.append(f"{instance_file}:{i+1}")
            except json.JSONDecodeError as e:
                logger.warning("Skipping line %d of %s: %s", i + 1, instance_file, e)
    return instances, instance_paths


def validate_file(instance_file: str, schema_file: str, store: SchemaStore = None,
                  validator: Validator = None) -> List[ValidationResult]:
    """Validates JSON instance file(s) against a schema file.

    Args:
        instance_file: Path to JSON file (single object, array, or JSONL)
        schema_file: Path to the JSON schema file
        store: Optional SchemaStore to build the schema with
        validator: Optional configured Validator

    Returns:
        List of ValidationResult for each instance in the file
    """
    store = store or SchemaStore()
    schema = store.load_schema_file(schema_file)
    validator = validator or Validator()

    # A schema that expects an array at the root validates the whole array as one instance
    schema_is_array = schema.explicit_types == {'array'}
    instances, instance_paths = load_instances(instance_file, schema_is_array)

    results = []
    for instance, path in zip(instances, instance_paths):
        result = validate_instance(instance, schema, validator)
        result.instance_path = path
        results.append(result)
    return results


def validate_json_instances(input_files: List[str], schema_file: str, verbose: bool = False) -> Tuple[int, int]:
    """Validates multiple JSON instance files against a schema.

    Args:
        input_files: List of JSON file paths to validate
        schema_file: Path to schema file
        verbose: Whether to print validation results

    Returns:
        Tuple of (valid_count, invalid_count)
    """
    valid_count = 0
    invalid_count = 0
    store = SchemaStore()
    validator = Validator()

    for input_file in input_files:
        for result in validate_file(input_file, schema_file, store, validator):
            if result.is_valid:
                valid_count += 1
            else:
                invalid_count += 1
            if verbose:
                print(result)

    return valid_count, invalid_count


def report(input: str, schema: str, out: str = None) -> dict:  # pylint: disable=redefined-builtin
    """Writes the output report for one instance document.

    Args:
        input: Path to the JSON instance document
        schema: Path to the JSON schema file
        out: Optional output file; the report is printed when omitted

    Returns:
        The output report
    """
    store = SchemaStore()
    root = store.load_schema_file(schema)
    with open(input, 'r', encoding='utf-8') as f:
        document = json.load(f)
    output = Validator().validate_with_output(store, root, document)
    text = json.dumps(output, indent=2)
    if out:
        with open(out, 'w', encoding='utf-8') as f:
            f.write(text + '\n')
    else:
        print(text)
    return output


# Command entry point for the jsonsval CLI
def validate(input: List[str], schema: str, quiet: bool = False) -> None:  # pylint: disable=redefined-builtin
    """Validates JSON instances against a JSON schema.

    Args:
        input: List of JSON files to validate
        schema: Path to the JSON schema file
        quiet: Suppress output, exit with code 0 if valid, 1 if invalid
    """
    valid_count, invalid_count = validate_json_instances(
        input_files=input,
        schema_file=schema,
        verbose=not quiet
    )

    if not quiet:
        total = valid_count + invalid_count
        print(f"\nValidation summary: {valid_count}/{total} instances valid")

    if invalid_count > 0:
        sys.exit(1)
