import io
import json
import os
import unittest
import urllib.error
from unittest import mock

from l2w_puzzle.exceptions import FeedbackConfigError
from l2w_puzzle.telemetry import (
    FEEDBACK_URL_ENV,
    FeedbackSubmission,
    resolve_feedback_url,
    submit_feedback,
    submit_feedback_async,
)


URL = "https://script.google.com/macros/s/abc123/exec"


def answering(body):
    requests = []

    def opener(request, timeout=None):
        requests.append(request)
        return io.BytesIO(body)

    return opener, requests


class TestFeedback(unittest.TestCase):

    def setUp(self):
        self.submission = FeedbackSubmission(3, "Was it fun?", "yes", level=2)

    def test_payload(self):
        self.assertEqual(
            self.submission.to_payload(),
            {"questionId": 3, "question": "Was it fun?", "answer": "yes", "level": 2},
        )

    def test_url_from_environment(self):
        with mock.patch.dict(os.environ, {FEEDBACK_URL_ENV: URL}):
            self.assertEqual(resolve_feedback_url(), URL)
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertRaises(FeedbackConfigError):
                resolve_feedback_url()
        with self.assertRaises(FeedbackConfigError):
            resolve_feedback_url("https://example.com/feedback")

    def test_missing_url_is_not_fatal(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            with self.assertLogs("l2w_puzzle.telemetry", level="WARNING"):
                self.assertFalse(submit_feedback(self.submission))

    def test_success(self):
        opener, requests = answering(b'{"success": true}')
        self.assertTrue(submit_feedback(self.submission, URL, opener))
        request = requests[0]
        self.assertEqual(request.get_method(), "POST")
        self.assertEqual(json.loads(request.data.decode("utf-8"))["questionId"], 3)

    def test_unsuccessful_body(self):
        opener, _ = answering(b'{"success": false}')
        self.assertFalse(submit_feedback(self.submission, URL, opener))
        opener, _ = answering(b"<html>")
        self.assertFalse(submit_feedback(self.submission, URL, opener))

    def test_http_error(self):
        def opener(request, timeout=None):
            raise urllib.error.HTTPError(URL, 500, "Server Error", None, None)

        with self.assertLogs("l2w_puzzle.telemetry", level="WARNING"):
            self.assertFalse(submit_feedback(self.submission, URL, opener))

    def test_network_error(self):
        def opener(request, timeout=None):
            raise urllib.error.URLError("unreachable")

        self.assertFalse(submit_feedback(self.submission, URL, opener))

    def test_async_submission(self):
        results = []
        with mock.patch("urllib.request.urlopen", return_value=io.BytesIO(b'{"success": true}')):
            thread = submit_feedback_async(self.submission, URL, callback=results.append)
            thread.join(timeout=5)
        self.assertTrue(thread.daemon)
        self.assertEqual(results, [True])


if __name__ == '__main__':
    unittest.main()
