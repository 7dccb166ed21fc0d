#!/usr/bin/env python

# This software is provided 'as-is', without any express or implied
# warranty.  In no event will the author be held liable for any damages
# arising from the use of this software.
#
# Permission is granted to anyone to use this software for any purpose,
# including commercial applications, and to alter it and redistribute it
# freely, subject to the following restrictions:
#
# 1. The origin of this software must not be misrepresented; you must not
#    claim that you wrote the original software. If you use this software
#    in a product, an acknowledgment in the product documentation would be
#    appreciated but is not required.
# 2. Altered source versions must be plainly marked as such, and must not be
#    misrepresented as being the original software.
# 3. This notice may not be removed or altered from any source distribution.
#
# Copyright (c) 2008 Greg Hewgill http://hewgill.com
#
# This has been modified from the original software.
# Copyright (c) 2011 William Grant <me@williamgrant.id.au>

import sys
import argparse
import logging

import dkimcore


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Compute the DKIM simple body hash of an email message.')
    parser.add_argument('--length', type=int, default=0,
        help='Body length limit, as in the l= tag: default=0 (whole body)')
    parser.add_argument('--headers', action='store_true',
        help='List header field names and counts before the body hash.')
    parser.add_argument('--debug', action='store_true',
        help='Write debug logging to stderr.')
    args = parser.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    # Work on bytes; line endings are normalized by split.
    message = sys.stdin.buffer.read()
    try:
        headers, body = dkimcore.split(message)
    except dkimcore.MalformedMessageError as e:
        print(e, file=sys.stderr)
        return 1
    if args.headers:
        for name, fields in headers.items():
            print("%s: %d" % (name.decode('ascii', 'replace'), len(fields)))
        print("hops: %d" % dkimcore.count_received_headers(headers))
    canonical = dkimcore.canonicalize_body_simple(body)
    print("bh=%s" % dkimcore.body_hash(canonical, args.length))
    return 0


if __name__ == '__main__':
    sys.exit(main())
