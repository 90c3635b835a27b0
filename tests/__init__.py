# Copyright (C) 2024-2025 The zcash-signer developers
#
# This file is part of zcash-signer
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of zcash-signer, including this file, may be copied,
# modified, propagated, or distributed except according to the terms contained
# in the LICENSE file.
