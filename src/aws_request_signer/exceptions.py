# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0


class AWSSDKWarning(UserWarning): ...


class BaseAWSSDKException(Exception):
    """Top-level exception to capture SDK-related errors."""


class SigningConfigurationException(BaseAWSSDKException, ValueError):
    """The signing properties are invalid for the requested signing mode."""


class MissingExpectedParameterException(SigningConfigurationException):
    """Some APIs require specific signing properties to be present."""


class UnsupportedOperationException(BaseAWSSDKException, NotImplementedError):
    """The signer was asked to operate in a mode it does not implement."""
