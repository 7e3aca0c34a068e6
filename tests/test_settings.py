"""
Unit tests for FinanceTracker.settings.lib and FinanceTracker.settings.locale
(covers validators, ConfigPaths, SettingsAPI and formatting helpers).

Run with:
    python -m unittest tests.test_settings
"""
import json
from typing import Any, Dict

from FinanceTracker.settings import lib
from FinanceTracker.settings import locale as fmt
from FinanceTracker.settings.lib import SettingsAPI, _check_type, _validate_currencies
from FinanceTracker.status import status
from FinanceTracker.ui.actions import signals
from tests.base import BaseTestCase, SignalRecorder, mute_ui_signals


def template_data() -> Dict[str, Any]:
    with lib.settings.settings_template.open('r', encoding='utf-8') as f:
        return json.load(f)


class HelperTest(BaseTestCase):
    def test_check_type(self):
        self.assertTrue(_check_type(25, float))
        self.assertTrue(_check_type(25.5, float))
        self.assertFalse(_check_type(True, float))
        self.assertFalse(_check_type(True, int))
        self.assertFalse(_check_type(2.0, int))
        self.assertTrue(_check_type('x', str))

    def test_validate_currencies(self):
        schema = lib.SETTINGS_SCHEMA['currencies']['item_schema']
        _validate_currencies([{'code': 'USD', 'symbol': '$', 'label': 'Dollar'}], schema)

        with self.assertRaises(ValueError):
            _validate_currencies([], schema)
        with self.assertRaises(ValueError):
            _validate_currencies([
                {'code': 'USD', 'symbol': '$', 'label': ''},
                {'code': 'USD', 'symbol': 'US$', 'label': ''},
            ], schema)
        with self.assertRaises(ValueError):
            _validate_currencies([{'code': 'USD', 'symbol': ' ', 'label': ''}], schema)
        with self.assertRaises(TypeError):
            _validate_currencies(['USD'], schema)


class ConfigPathsTest(BaseTestCase):
    def test_paths(self):
        self.assertTrue(self.config_paths.settings_template.exists())
        self.assertTrue(lib.settings.settings_path.exists())
        self.assertTrue(lib.settings.auth_dir.is_dir())
        self.assertEqual(lib.settings.creds_path.name, 'service_account.json')

    def test_revert_settings_to_template(self):
        lib.settings.settings_path.write_text('{}', encoding='utf-8')
        lib.settings.revert_settings_to_template()
        self.assertEqual(json.loads(lib.settings.settings_path.read_text(encoding='utf-8')), template_data())


class SettingsAPITest(BaseTestCase):
    def test_template_is_valid(self):
        lib.settings.validate_settings_data(template_data())
        self.assertEqual(lib.settings.get_section('store')['backend'], 'memory')
        self.assertEqual(lib.settings.get_section('collections'), {'expenses': 'expenses', 'goals': 'goals'})

    def test_get_section_returns_copies(self):
        currencies = lib.settings.get_section('currencies')
        currencies[0]['symbol'] = 'X'
        self.assertEqual(lib.settings.get_section('currencies')[0]['symbol'], '$')

        store = lib.settings.get_section('store')
        store['backend'] = 'firestore'
        self.assertEqual(lib.settings.get_section('store')['backend'], 'memory')

    def test_metadata_access(self):
        self.assertEqual(lib.settings['locale'], 'en_US')
        self.assertEqual(lib.settings['milestone_threshold'], 25.0)
        self.assertEqual(lib.settings['goal_duration_days'], 30)
        self.assertEqual(lib.settings['sort_order'], 'newest')

        with self.assertRaises(KeyError):
            _ = lib.settings['theme']

    def test_metadata_set_converts_and_persists(self):
        changes = SignalRecorder(signals.metadataChanged)
        lib.settings['goal_duration_days'] = '45'
        self.assertEqual(lib.settings['goal_duration_days'], 45)
        self.assertEqual(changes.last, ('goal_duration_days', 45))

        reloaded = SettingsAPI()
        self.assertEqual(reloaded['goal_duration_days'], 45)

    def test_metadata_set_rejects_bad_values(self):
        with self.assertRaises(ValueError):
            lib.settings['sort_order'] = 'alphabetical'
        with self.assertRaises(ValueError):
            lib.settings['milestone_threshold'] = 'high'
        with self.assertRaises(KeyError):
            lib.settings['theme'] = 'dark'

    def test_set_section(self):
        changes = SignalRecorder(signals.configSectionChanged)
        lib.settings.set_section('collections', {'expenses': 'spending', 'goals': 'savings'})
        self.assertEqual(lib.settings.get_section('collections')['expenses'], 'spending')
        self.assertEqual(changes.last, 'collections')

        on_disk = json.loads(lib.settings.settings_path.read_text(encoding='utf-8'))
        self.assertEqual(on_disk['collections']['goals'], 'savings')

    def test_set_section_rolls_back_invalid_data(self):
        with mute_ui_signals():
            for data in ({'backend': 'sqlite'}, {'project': 'x'}, []):
                with self.subTest(data=data):
                    with self.assertRaises(ValueError):
                        lib.settings.set_section('store', data)
                    self.assertEqual(lib.settings.get_section('store')['backend'], 'memory')

        with self.assertRaises(ValueError):
            lib.settings.set_section('unknown', {})

    def test_revert_section(self):
        lib.settings.set_section('collections', {'expenses': 'spending', 'goals': 'savings'})
        lib.settings.revert_section('collections')
        self.assertEqual(lib.settings.get_section('collections')['expenses'], 'expenses')

    def test_missing_settings_file(self):
        lib.settings.settings_path.unlink()
        with mute_ui_signals(), self.assertRaises(status.SettingsNotFoundException):
            lib.settings.load_settings()

    def test_invalid_settings_file(self):
        lib.settings.settings_path.write_text('{not json', encoding='utf-8')
        with mute_ui_signals(), self.assertRaises(status.SettingsInvalidException):
            lib.settings.load_settings()

        data = template_data()
        del data['metadata']['sort_order']
        lib.settings.settings_path.write_text(json.dumps(data), encoding='utf-8')
        with mute_ui_signals(), self.assertRaises(status.SettingsInvalidException):
            lib.settings.load_settings()

        data = template_data()
        del data['currencies']
        lib.settings.settings_path.write_text(json.dumps(data), encoding='utf-8')
        with mute_ui_signals(), self.assertRaises(status.SettingsInvalidException):
            lib.settings.load_settings()


class LocaleTest(BaseTestCase):
    def test_format_amount(self):
        self.assertEqual(fmt.format_amount(1234.5, '$'), '$1,234.50')
        self.assertEqual(fmt.format_amount(3, '€', 'de_DE'), '€3,00')
        self.assertEqual(fmt.format_amount(0.5), '0.50')

    def test_unknown_locale_falls_back(self):
        self.assertEqual(fmt.format_amount(1, '$', 'xx_YY'), '$1.00')

    def test_format_percent(self):
        self.assertEqual(fmt.format_percent(25.0), '25%')
        self.assertEqual(fmt.format_percent(100.0), '100%')

    def test_format_iso_date(self):
        self.assertEqual(fmt.format_iso_date('2024-03-15'), 'Mar 15, 2024')
        self.assertEqual(fmt.format_iso_date('2024-03-15T10:00:00Z'), 'Mar 15, 2024')
        self.assertEqual(fmt.format_iso_date('garbage'), 'garbage')
