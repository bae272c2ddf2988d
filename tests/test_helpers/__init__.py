from .client_creator import (
    create_test_client, TEST_RPC_URL, TEST_PRIV_KEY, TEST_TOKEN,
    TEST_STAKE_MANAGER, TEST_EPOCH_LENGTH
)
