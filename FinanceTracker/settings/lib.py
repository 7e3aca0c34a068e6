"""Settings library for store, collection, currency and display configuration.

Provides:
    - Schema validation and enforcement for the settings.json structure.
    - Loading, saving, reverting, and managing application settings.
    - Constants for backends, sort orders and metadata keys.
"""

import json
import logging
import pathlib
import shutil
from typing import Dict, Any, Optional, List

from PySide6 import QtCore

from ..status import status

app_name: str = 'FinanceTracker'

STORE_BACKENDS: List[str] = ['memory', 'firestore']
SORT_ORDERS: List[str] = ['newest', 'oldest']
COLLECTION_KEYS: List[str] = ['expenses', 'goals']

METADATA_KEYS: List[str] = [
    'locale',
    'milestone_threshold',
    'goal_duration_days',
    'sort_order',
]

SETTINGS_SCHEMA: Dict[str, Any] = {
    'store': {
        'type': dict,
        'required': True,
        'item_schema': {
            'backend': {'type': str, 'required': True, 'allowed_values': STORE_BACKENDS},
            'project': {'type': str, 'required': False},
        }
    },
    'collections': {
        'type': dict,
        'required': True,
        'item_schema': {
            'expenses': {'type': str, 'required': True, 'non_empty': True},
            'goals': {'type': str, 'required': True, 'non_empty': True},
        }
    },
    'currencies': {
        'type': list,
        'required': True,
        'item_schema': {
            'code': {'type': str, 'required': True, 'non_empty': True},
            'symbol': {'type': str, 'required': True, 'non_empty': True},
            'label': {'type': str, 'required': True},
        }
    },
    'metadata': {
        'type': dict,
        'required': True,
        'required_keys': METADATA_KEYS,
        'item_schema': {
            'locale': {'type': str, 'required': True},
            'milestone_threshold': {'type': float, 'required': True},
            'goal_duration_days': {'type': int, 'required': True},
            'sort_order': {'type': str, 'required': True, 'allowed_values': SORT_ORDERS},
        }
    },
}


def _check_type(value: Any, expected: type) -> bool:
    # JSON has a single number type, ints are fine where floats are expected
    if expected is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def _validate_item(section: str, item: Dict[str, Any], item_schema: Dict[str, Any]) -> None:
    """Validate a single mapping against an item schema.

    Args:
        section: Section name, used in error messages.
        item: The mapping to validate.
        item_schema: Field name to field schema.

    Raises:
        TypeError: If the item is not a dict or a field has the wrong type.
        ValueError: If a required field is missing, empty, or not an allowed value.
    """
    if not isinstance(item, dict):
        msg: str = f'"{section}" entries must be dicts, got {type(item)}.'
        logging.error(msg)
        raise TypeError(msg)

    for field, field_specs in item_schema.items():
        if field not in item:
            if field_specs['required']:
                msg = f'"{section}" is missing "{field}".'
                logging.error(msg)
                raise ValueError(msg)
            continue

        value = item[field]
        if not _check_type(value, field_specs['type']):
            msg = f'"{section}" field "{field}" must be {field_specs["type"]}, got {type(value)}.'
            logging.error(msg)
            raise TypeError(msg)
        if field_specs.get('non_empty') and not value.strip():
            msg = f'"{section}" field "{field}" must not be empty.'
            logging.error(msg)
            raise ValueError(msg)
        if 'allowed_values' in field_specs and value not in field_specs['allowed_values']:
            msg = f'"{section}" field "{field}" must be one of {field_specs["allowed_values"]}, got "{value}".'
            logging.error(msg)
            raise ValueError(msg)


def _validate_currencies(currencies: List[Dict[str, Any]], item_schema: Dict[str, Any]) -> None:
    """Validate the 'currencies' section: a non-empty list of unique currency codes."""
    logging.debug('Validating "currencies" section.')
    if not currencies:
        msg: str = '"currencies" must contain at least one currency.'
        logging.error(msg)
        raise ValueError(msg)

    seen: set = set()
    for currency in currencies:
        _validate_item('currencies', currency, item_schema)
        if currency['code'] in seen:
            msg = f'Duplicate currency code "{currency["code"]}".'
            logging.error(msg)
            raise ValueError(msg)
        seen.add(currency['code'])


class ConfigPaths:
    """Manage application file paths and ensure the default settings template is in place."""

    def __init__(self) -> None:
        QtCore.QCoreApplication.setApplicationName(app_name)
        QtCore.QCoreApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.settings_template: pathlib.Path = self.template_dir / 'settings.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.auth_dir: pathlib.Path = self.config_dir / 'auth'

        self.settings_path: pathlib.Path = self.config_dir / 'settings.json'
        self.creds_path: pathlib.Path = self.auth_dir / 'service_account.json'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists, create directories and copy the default settings.

        Raises:
            FileNotFoundError: If the template directory or file is missing.
        """
        logging.debug(f'Verifying required templates in {self.template_dir}')
        if not self.template_dir.exists():
            msg: str = f'Missing template directory: {self.template_dir}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        if not self.settings_template.exists():
            msg = f'Missing settings template: {self.settings_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        for directory in (self.config_dir, self.auth_dir):
            if not directory.exists():
                logging.debug(f'Creating directory: {directory}')
                directory.mkdir(parents=True, exist_ok=True)

        if not self.settings_path.exists():
            logging.debug(f'Copying default settings from template to {self.settings_path}')
            shutil.copy(self.settings_template, self.settings_path)

    def revert_settings_to_template(self) -> None:
        """Restore settings.json from the default template file."""
        logging.debug(f'Reverting settings to template: {self.settings_template}')
        shutil.copy(self.settings_template, self.settings_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/revert/save settings.json sections.
    """

    def __init__(self, settings_path: Optional[str] = None) -> None:
        super().__init__()

        self.settings_path: pathlib.Path = pathlib.Path(settings_path) if settings_path else self.settings_path

        self._signals_blocked: bool = False
        self.settings_data: Dict[str, Any] = {}

        self.init_data()

    def __getitem__(self, key: str) -> Any:
        """Retrieve a metadata value using dictionary-style access.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        if 'metadata' not in self.settings_data:
            raise RuntimeError('Malformed settings data, missing "metadata" section.')

        _type = SETTINGS_SCHEMA['metadata']['item_schema'][key]['type']
        v = self.settings_data['metadata'].get(key)
        if not _check_type(v, _type):
            logging.error(f'Metadata key "{key}" is not of type {_type}, got {type(v)}.')
            return None
        return v

    def __setitem__(self, key: str, value: Any) -> None:
        """Assign a metadata value using dictionary-style access and persist it.

        Raises:
            KeyError: If key is not in METADATA_KEYS.
            ValueError: If the value cannot be converted or is not allowed.
        """
        if key not in METADATA_KEYS:
            raise KeyError(f'Invalid metadata key: {key}, must be one of {METADATA_KEYS}')

        specs = SETTINGS_SCHEMA['metadata']['item_schema'][key]
        _type = specs['type']
        if not _check_type(value, _type):
            logging.warning(f'Metadata key "{key}" is not of type {_type}, got {type(value)}.')
            try:
                value = _type(value)
            except (TypeError, ValueError):
                logging.error(f'Cannot convert "{value}" to {_type}.')
                raise ValueError(f'Cannot convert "{value}" to {_type}.')

        if 'allowed_values' in specs and value not in specs['allowed_values']:
            raise ValueError(f'Metadata key "{key}" must be one of {specs["allowed_values"]}.')

        self.settings_data['metadata'][key] = value
        self.save_section('metadata')

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.metadataChanged.emit(key, value)

    def block_signals(self, v: bool) -> None:
        self._signals_blocked = v

    @QtCore.Slot()
    def init_data(self) -> None:
        """Reload settings from disk and announce every section."""
        self.load_settings()

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        for section in SETTINGS_SCHEMA.keys():
            signals.configSectionChanged.emit(section)

    def load_settings(self) -> Dict[str, Any]:
        """Load settings.json from disk and validate against the schema.

        Raises:
            status.SettingsNotFoundException: If settings.json is missing.
            status.SettingsInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading settings from "{self.settings_path}"')
        if not self.settings_path.exists():
            raise status.SettingsNotFoundException

        try:
            with self.settings_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_settings_data(data)
        except status.SettingsInvalidException:
            raise
        except (ValueError, TypeError, json.JSONDecodeError) as ex:
            raise status.SettingsInvalidException(str(ex)) from ex

        self.settings_data = data
        return self.settings_data

    def validate_settings_data(self, data: Dict[str, Any] = None) -> None:
        """Validate settings data against SETTINGS_SCHEMA.

        Raises:
            RuntimeError: If data is empty.
            status.SettingsInvalidException: If a required section is missing or has the wrong type.
            TypeError, ValueError: If a section's content is invalid.
        """
        if data is None:
            data = self.settings_data
        if not data:
            raise RuntimeError('Settings data is empty.')

        logging.debug('Validating settings data against schema.')
        for field, specs in SETTINGS_SCHEMA.items():
            if specs.get('required') and field not in data:
                raise status.SettingsInvalidException(f'Missing required field: {field}')

            if not isinstance(data[field], specs['type']):
                raise status.SettingsInvalidException(
                    f'Field "{field}" must be {specs["type"]}, got {type(data[field])}.')

            if field == 'currencies':
                _validate_currencies(data[field], specs['item_schema'])
                continue

            missing = [k for k in specs.get('required_keys', []) if k not in data[field]]
            if missing:
                raise ValueError(f'"{field}" is missing keys: {missing}')
            _validate_item(field, data[field], specs['item_schema'])

        logging.debug('Settings data is valid.')

    def get_section(self, section_name: str) -> Any:
        """Retrieve a copy of a settings section.

        Raises:
            KeyError: If section_name is not a known section.
        """
        value = self.settings_data[section_name]
        if isinstance(value, list):
            return [dict(v) for v in value]
        return value.copy()

    def set_section(self, section_name: str, new_data: Any) -> None:
        """Replace, validate and persist a settings section.

        The previous value is restored when validation fails.

        Raises:
            ValueError: If section_name is unknown or the new data is invalid.
            TypeError: If the new data has the wrong type.
        """
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data = self.settings_data.get(section_name)

        self.settings_data[section_name] = new_data
        try:
            self.validate_settings_data()
        except (ValueError, TypeError, status.SettingsInvalidException) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.settings_data[section_name] = current_section_data
            raise ValueError(str(e)) from e

        self.save_section(section_name)

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def revert_section(self, section_name: str) -> None:
        """Revert a settings section to its template default and save."""
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for revert: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.settings_template.open('r', encoding='utf-8') as f:
            template_data: Dict[str, Any] = json.load(f)

        self.settings_data[section_name] = template_data[section_name]
        self.save_section(section_name)

        if self._signals_blocked:
            return

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Persist a single settings section, leaving the others on disk untouched."""
        if section_name not in self.settings_data:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        with self.settings_path.open('r', encoding='utf-8') as f:
            original_data: Dict[str, Any] = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.settings_data[section_name]

        with self.settings_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)


settings: SettingsAPI = SettingsAPI()
