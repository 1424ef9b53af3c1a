"""Unit tests for MongoUserRepository with a mocked pymongo collection.

These pin down the exact single-document operations each method issues,
since the atomicity guarantees live in those queries.
"""

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from adapter.mongodb.user_repository import MongoUserRepository
from domain.model.errors import DuplicateError
from domain.model.user import User

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _doc(**overrides) -> dict:
    doc = {
        '_id': 'user-1',
        'name': 'Cook',
        'email': 'cook@example.com',
        'created_at': NOW,
        'updated_at': NOW,
        'password_hash': '$2b$04$hash',
        'password_set': True,
        'auth_provider': 'local',
        'is_verified': True,
        'favorites': [],
    }
    doc.update(overrides)
    return doc


class MongoRepoTestCase(unittest.TestCase):

    def setUp(self):
        self.collection = MagicMock()
        db = MagicMock()
        db.__getitem__.return_value = self.collection
        self.repo = MongoUserRepository(db)


class TestToDomain(MongoRepoTestCase):

    def test_full_document(self):
        user = self.repo._to_domain(_doc(google_id='g1', photo='p.png'))

        self.assertEqual(user.id, 'user-1')
        self.assertEqual(user.google_id, 'g1')
        self.assertTrue(user.password_set)
        self.assertEqual(user.photo, 'p.png')

    def test_legacy_document_leaves_flags_unset(self):
        doc = _doc()
        del doc['password_set'], doc['auth_provider'], doc['favorites'], doc['updated_at']

        user = self.repo._to_domain(doc)

        self.assertIsNone(user.password_set)
        self.assertIsNone(user.auth_provider)
        self.assertEqual(user.favorites, [])
        self.assertEqual(user.updated_at, NOW)


class TestReads(MongoRepoTestCase):

    def test_get_by_email(self):
        self.collection.find_one.return_value = _doc()

        user = self.repo.get_by_email('cook@example.com')

        self.assertEqual(user.email, 'cook@example.com')
        self.collection.find_one.assert_called_once_with({'email': 'cook@example.com'})

    def test_get_by_google_id_not_found(self):
        self.collection.find_one.return_value = None

        self.assertIsNone(self.repo.get_by_google_id('g1'))
        self.collection.find_one.assert_called_once_with({'google_id': 'g1'})

    def test_get_by_id_matches_object_id_keys(self):
        legacy_id = ObjectId()
        self.collection.find_one.return_value = _doc(_id=legacy_id)

        user = self.repo.get_by_id(str(legacy_id))

        self.assertEqual(user.id, str(legacy_id))
        self.collection.find_one.assert_called_once_with({'_id': legacy_id})

    def test_get_by_id_keeps_hex_uuid_keys(self):
        self.collection.find_one.return_value = None
        uuid_hex = '0f8fad5bd9cb469fa16570867728950e'

        self.repo.get_by_id(uuid_hex)

        self.collection.find_one.assert_called_once_with({'_id': uuid_hex})

    def test_read_error_propagates(self):
        self.collection.find_one.side_effect = PyMongoError("boom")
        for read in (self.repo.get_by_id, self.repo.get_by_email, self.repo.get_by_google_id):
            with self.subTest(read=read.__name__):
                with self.assertRaises(PyMongoError):
                    read("user-1")


class TestCreate(MongoRepoTestCase):

    def _user(self, **kwargs):
        return User(id='', name='Ana', email='ana@example.com', created_at=NOW, updated_at=NOW, **kwargs)

    def test_create_omits_unlinked_google_id(self):
        user = self.repo.create(self._user(password_set=False, auth_provider='google'))

        inserted = self.collection.insert_one.call_args[0][0]
        self.assertNotIn('google_id', inserted)
        self.assertNotIn('id', inserted)
        self.assertTrue(inserted['_id'])
        self.assertEqual(user.id, inserted['_id'])

    def test_create_keeps_google_id(self):
        self.repo.create(self._user(google_id='g1'))
        self.assertEqual(self.collection.insert_one.call_args[0][0]['google_id'], 'g1')

    def test_duplicate_key_becomes_duplicate_error(self):
        self.collection.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key")
        with self.assertRaises(DuplicateError):
            self.repo.create(self._user())

    def test_other_errors_propagate(self):
        self.collection.insert_one.side_effect = PyMongoError("network")
        with self.assertRaises(PyMongoError):
            self.repo.create(self._user())


class TestUpsertPending(MongoRepoTestCase):

    def test_single_atomic_upsert_on_unverified_record(self):
        expiry = NOW + timedelta(minutes=10)
        self.collection.find_one_and_update.return_value = _doc(is_verified=False, otp_code='123456')

        user = self.repo.upsert_pending('ana@example.com', 'Ana', 'hash', '123456', expiry)

        self.assertFalse(user.is_verified)
        args, kwargs = self.collection.find_one_and_update.call_args
        query, update = args
        self.assertEqual(query, {'email': 'ana@example.com', 'is_verified': False})
        self.assertEqual(update['$set']['otp_code'], '123456')
        self.assertEqual(update['$set']['otp_expires_at'], expiry)
        self.assertTrue(update['$set']['password_set'])
        self.assertEqual(update['$setOnInsert']['auth_provider'], 'local')
        self.assertNotIn('email', update['$setOnInsert'])
        self.assertTrue(kwargs['upsert'])
        self.assertEqual(kwargs['return_document'], ReturnDocument.AFTER)

    def test_verified_owner_raises_duplicate(self):
        self.collection.find_one_and_update.side_effect = [DuplicateKeyError("E11000"), None]

        with self.assertRaises(DuplicateError):
            self.repo.upsert_pending('cook@example.com', 'Cook', 'h', '123456', NOW)

    def test_concurrent_insert_is_retried_as_update(self):
        self.collection.find_one_and_update.side_effect = [
            DuplicateKeyError("E11000"), _doc(is_verified=False),
        ]

        user = self.repo.upsert_pending('cook@example.com', 'Cook', 'h', '123456', NOW)

        self.assertEqual(user.id, 'user-1')
        retry_kwargs = self.collection.find_one_and_update.call_args_list[1][1]
        self.assertNotIn('upsert', retry_kwargs)


class TestConsumeOtp(MongoRepoTestCase):

    def test_matches_email_code_and_expiry(self):
        self.collection.find_one_and_update.return_value = _doc()

        self.repo.consume_otp('cook@example.com', '123456', NOW)

        query, update = self.collection.find_one_and_update.call_args[0]
        self.assertEqual(query, {
            'email': 'cook@example.com', 'otp_code': '123456', 'otp_expires_at': {'$gt': NOW},
        })
        self.assertTrue(update['$set']['is_verified'])
        self.assertEqual(set(update['$unset']), {'otp_code', 'otp_expires_at'})

    def test_no_match(self):
        self.collection.find_one_and_update.return_value = None
        self.assertIsNone(self.repo.consume_otp('cook@example.com', '000000', NOW))


class TestPasswordWrites(MongoRepoTestCase):

    def test_set_password_hash_filters_out_users_with_password(self):
        self.collection.update_one.return_value.modified_count = 1

        self.assertTrue(self.repo.set_password_hash('user-1', 'hash'))

        query, update = self.collection.update_one.call_args[0]
        self.assertEqual(query, {'_id': 'user-1', 'password_set': {'$ne': True}})
        self.assertEqual(update['$set']['password_hash'], 'hash')
        self.assertTrue(update['$set']['password_set'])

    def test_set_password_hash_refused(self):
        self.collection.update_one.return_value.modified_count = 0
        self.assertFalse(self.repo.set_password_hash('user-1', 'hash'))

    def test_replace_requires_password_set(self):
        self.collection.update_one.return_value.matched_count = 1

        self.assertTrue(self.repo.replace_password_hash('user-1', 'hash2'))

        query, update = self.collection.update_one.call_args[0]
        self.assertEqual(query, {'_id': 'user-1', 'password_set': True})
        self.assertNotIn('password_set', update['$set'])


class TestToggleFavorite(MongoRepoTestCase):

    def test_single_pipeline_update(self):
        self.collection.find_one_and_update.return_value = _doc(favorites=['r1'])

        favorites = self.repo.toggle_favorite('user-1', 'r1')

        self.assertEqual(favorites, ['r1'])
        query, pipeline = self.collection.find_one_and_update.call_args[0]
        self.assertEqual(query, {'_id': 'user-1'})
        self.assertIsInstance(pipeline, list)
        self.assertIn('$cond', pipeline[0]['$set']['favorites'])

    def test_missing_user(self):
        self.collection.find_one_and_update.return_value = None
        self.assertIsNone(self.repo.toggle_favorite('missing', 'r1'))


class TestUpdateFields(MongoRepoTestCase):

    def test_sets_exactly_given_fields_plus_timestamp(self):
        self.collection.find_one_and_update.return_value = _doc(google_id='g1')

        self.repo.update_fields('user-1', {'google_id': 'g1'})

        update = self.collection.find_one_and_update.call_args[0][1]
        self.assertEqual(set(update['$set']), {'google_id', 'updated_at'})

    def test_duplicate_google_id(self):
        self.collection.find_one_and_update.side_effect = DuplicateKeyError("E11000")
        with self.assertRaises(DuplicateError):
            self.repo.update_fields('user-1', {'google_id': 'g1'})


class TestEnsureIndexes(MongoRepoTestCase):

    def test_unique_email_and_partial_unique_google_id(self):
        self.assertTrue(self.repo.ensure_indexes())

        calls = {c[1]['name']: c for c in self.collection.create_index.call_args_list}
        self.assertTrue(calls['idx_users_email'][1]['unique'])
        google = calls['idx_users_google_id'][1]
        self.assertTrue(google['unique'])
        self.assertEqual(google['partialFilterExpression'], {'google_id': {'$type': 'string'}})


if __name__ == '__main__':
    unittest.main()
