import unittest
import doctest
import dkimcore
import dkimcore.canonicalization
import dkimcore.util
from dkimcore.tests import test_suite

doctest.testmod(dkimcore)
doctest.testmod(dkimcore.canonicalization)
doctest.testmod(dkimcore.util)
unittest.TextTestRunner().run(test_suite())
